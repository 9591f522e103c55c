from popcollapse.cluster.naming import build_reassignment_table, group_label, name_clusters, print_groupings


def test_singletons_get_no_name():
    assert name_clusters([["A"], ["B"]]) == []


def test_group_label_format():
    assert group_label("3", 2) == "Group_3.2"
    assert group_label(1, 1) == "Group_1.1"


def test_ranked_by_joined_name_length_then_first_member():
    clusters = [["A", "B"], ["CCC", "D"], ["E"], ["FF", "G"], ["Ha", "I"]]
    groupings = name_clusters(clusters, iteration="2")
    # lengths of joined names: A-B=3, CCC-D=5, FF-G=4, Ha-I=4
    assert [(g.name, g.members) for g in groupings] == [
        ("Group_2.1", ["CCC", "D"]),
        ("Group_2.2", ["FF", "G"]),
        ("Group_2.3", ["Ha", "I"]),
        ("Group_2.4", ["A", "B"]),
    ]


def test_naming_independent_of_cluster_order():
    clusters = [["x1", "x2"], ["y1", "y2"], ["zz1", "zz2"]]
    forward = name_clusters(clusters)
    backward = name_clusters(list(reversed(clusters)))
    assert [(g.name, g.members) for g in forward] == [(g.name, g.members) for g in backward]


def test_reassignment_table_follows_group_order():
    groupings = name_clusters([["B", "C"], ["A"], ["D"]])
    table = build_reassignment_table(["D", "C", "A", "B"], groupings)
    assert table == [
        ("D", "D"),
        ("C", "Group_1.1"),
        ("A", "A"),
        ("B", "Group_1.1"),
    ]


def test_substring_names_are_not_confused():
    # "P1" is a substring of "P10"; only exact members are renamed
    groupings = name_clusters([["P1", "P2"], ["P10"]])
    table = build_reassignment_table(["P1", "P2", "P10"], groupings)
    assert dict(table) == {"P1": "Group_1.1", "P2": "Group_1.1", "P10": "P10"}


def test_print_groupings(capsys):
    print_groupings(name_clusters([["A", "B"]]), 0)
    out = capsys.readouterr().out
    assert "POPULATION GROUPINGS" in out
    assert "Group:Group_1.1" in out
    assert "A, B" in out


def test_print_no_groupings(capsys):
    print_groupings([], 0.5)
    assert "No populations collapsed at d <= 0.5" in capsys.readouterr().out


def test_tie_break_uses_first_member_in_group_order():
    # Equal joined lengths; first members are "Z" and "M", so "M" ranks first
    # even though "A" is the smallest name overall
    groupings = name_clusters([["Z", "A"], ["M", "B"]])
    assert [(g.name, g.members) for g in groupings] == [
        ("Group_1.1", ["M", "B"]),
        ("Group_1.2", ["Z", "A"]),
    ]


def test_print_groupings_with_bracketed_names(capsys):
    print_groupings(name_clusters([["pop[x]", "pop[/y]"]]), 0)
    out = capsys.readouterr().out
    assert "pop[x], pop[/y]" in out
