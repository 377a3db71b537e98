from reddit_status_checker.reddit.comments import (
    CommentNode,
    MoreNode,
    count_collapsed,
    parse_nodes,
)


def comment(score=1, collapsed=False, reason=None, replies=None):
    data = {"score": score, "collapsed": collapsed, "collapsed_reason": reason}
    data["replies"] = {"kind": "Listing", "data": {"children": replies}} if replies is not None else ""
    return {"kind": "t1", "data": data}


def more(count=None):
    data = {} if count is None else {"count": count}
    return {"kind": "more", "data": data}


def test_low_score_counts_once_without_flag():
    assert count_collapsed(parse_nodes([comment(score=-5)])) == 1


def test_collapsed_flag_with_low_score_counts_once():
    assert count_collapsed(parse_nodes([comment(score=-3, collapsed=True)])) == 1
    assert count_collapsed(parse_nodes([comment(score=-10, collapsed=True, reason="LOW_SCORE")])) == 1


def test_score_boundary():
    assert count_collapsed(parse_nodes([comment(score=-4)])) == 0


def test_collapse_reason_alone_counts():
    assert count_collapsed(parse_nodes([comment(reason="BLOCKED_AUTHOR")])) == 1


def test_more_node_contributes_its_count_at_any_depth():
    top_level = parse_nodes([more(7)])
    nested = parse_nodes([comment(replies=[comment(replies=[more(7)])])])
    assert count_collapsed(top_level) == 7
    assert count_collapsed(nested) == 7
    assert count_collapsed(parse_nodes([more()])) == 0


def test_nested_replies_are_walked():
    tree = [
        comment(score=5, replies=[
            comment(score=-6),
            comment(collapsed=True, replies=[comment(score=-20), more(2)]),
        ]),
        comment(score=3),
    ]
    assert count_collapsed(parse_nodes(tree)) == 5


def test_decoding_is_defensive():
    nodes = parse_nodes([
        {"kind": "t1"},
        {"kind": "t1", "data": {"score": "bad", "replies": {"data": None}}},
        {"kind": "t3", "data": {"score": -100}},
        "garbage",
        {"kind": "more", "data": {"count": "3"}},
    ])
    assert nodes == [CommentNode(), CommentNode(), MoreNode(count=0)]
    assert count_collapsed(nodes) == 0
    assert parse_nodes(None) == []


def test_deep_thread_does_not_hit_recursion_limit():
    node = CommentNode(score=-5)
    for _ in range(5000):
        node = CommentNode(score=-5, replies=[node])
    assert count_collapsed([node]) == 5001


def test_non_finite_numbers_are_ignored():
    nodes = parse_nodes([more(float("inf")), comment(score=float("nan")), more(float("-inf"))])
    assert nodes == [MoreNode(count=0), CommentNode(), MoreNode(count=0)]
