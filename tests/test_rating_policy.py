from routers.services.rating_policy import should_invalidate


def test_content_not_touched_never_invalidates():
    assert should_invalidate("Great day!", None) is False
    assert should_invalidate("", None) is False


def test_same_text_does_not_invalidate():
    assert should_invalidate("Great day!", "Great day!") is False


def test_changed_text_invalidates():
    assert should_invalidate("Great day!", "Terrible day.") is True


def test_comparison_is_literal():
    # 空白、大小写、标点的差异都视为文本变化
    assert should_invalidate("Great day!", "Great day! ") is True
    assert should_invalidate("Great day!", "great day!") is True
    assert should_invalidate("Great day!", "Great day") is True


def test_clearing_text_invalidates():
    assert should_invalidate("Great day!", "") is True
