from familyspace.core.layout import (
    MARGIN_X,
    MARGIN_Y,
    NODE_HEIGHT,
    NODE_SEP,
    NODE_WIDTH,
    RANK_SEP,
    SPOUSE_GAP,
    layout,
    pair_spouses,
)

PEOPLE = ["ahmad", "fatima", "mohammed", "nour", "wael", "sara"]
SPOUSES = [("ahmad", "fatima"), ("mohammed", "nour")]
PARENT_CHILD = [
    ("ahmad", "mohammed"),
    ("fatima", "mohammed"),
    ("mohammed", "wael"),
    ("nour", "wael"),
    ("mohammed", "sara"),
    ("nour", "sara"),
]


def test_pair_spouses_first_come_first_served():
    partner_of, primaries = pair_spouses([("a", "b"), ("a", "c"), ("d", "b"), ("e", "f"), ("g", "g")])

    assert primaries == ["a", "e"]
    assert partner_of == {"b": "a", "f": "e"}


def test_empty_layout():
    assert layout([], [], []) == {"positions": {}, "width": 0, "height": 0}


def test_single_person_sits_at_the_margin():
    out = layout(["solo"], [], [])

    assert out["positions"]["solo"] == {"x": MARGIN_X, "y": MARGIN_Y}
    assert out["width"] == MARGIN_X + NODE_WIDTH + MARGIN_X
    assert out["height"] == 2 * MARGIN_Y + NODE_HEIGHT


def test_spouses_share_a_row_side_by_side():
    pos = layout(PEOPLE, PARENT_CHILD, SPOUSES)["positions"]

    for primary, partner in SPOUSES:
        assert pos[partner]["y"] == pos[primary]["y"]
        assert pos[partner]["x"] == pos[primary]["x"] + NODE_WIDTH + SPOUSE_GAP


def test_generations_stack_top_to_bottom():
    out = layout(PEOPLE, PARENT_CHILD, SPOUSES)
    pos = out["positions"]
    step = NODE_HEIGHT + RANK_SEP

    assert pos["ahmad"]["y"] == MARGIN_Y
    assert pos["mohammed"]["y"] == MARGIN_Y + step
    assert pos["wael"]["y"] == pos["sara"]["y"] == MARGIN_Y + 2 * step
    assert out["height"] == 2 * MARGIN_Y + 3 * NODE_HEIGHT + 2 * RANK_SEP


def test_siblings_do_not_overlap():
    pos = layout(PEOPLE, PARENT_CHILD, SPOUSES)["positions"]
    assert abs(pos["sara"]["x"] - pos["wael"]["x"]) >= NODE_WIDTH + NODE_SEP


def test_everything_inside_the_canvas():
    out = layout(PEOPLE, PARENT_CHILD, SPOUSES)
    xs = [p["x"] for p in out["positions"].values()]

    assert min(xs) == MARGIN_X
    assert max(xs) + NODE_WIDTH + MARGIN_X <= out["width"]


def test_bottom_to_top_flips_generations():
    pos = layout(PEOPLE, PARENT_CHILD, SPOUSES, direction="BT")["positions"]

    assert pos["wael"]["y"] == MARGIN_Y
    assert pos["ahmad"]["y"] > pos["mohammed"]["y"] > pos["wael"]["y"]


def test_cycles_still_get_positions():
    out = layout(["a", "b"], [("a", "b"), ("b", "a")], [])
    assert set(out["positions"]) == {"a", "b"}


def test_edges_to_unknown_people_are_ignored():
    out = layout(["a"], [("a", "ghost")], [("a", "ghost")])
    assert out["positions"] == {"a": {"x": MARGIN_X, "y": MARGIN_Y}}


def test_second_spouse_stands_alone_on_the_same_row():
    out = layout(["a", "b", "c"], [], [("a", "b"), ("a", "c")])
    pos = out["positions"]

    assert pos["b"]["x"] == pos["a"]["x"] + NODE_WIDTH + SPOUSE_GAP
    assert pos["c"]["y"] == pos["a"]["y"]
    # c starts after the a+b unit instead of sitting on top of b
    assert pos["c"]["x"] >= pos["b"]["x"] + NODE_WIDTH + NODE_SEP
