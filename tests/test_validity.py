import pytest

from preference_groups import SetValueError, SetValueStep, ValidityProcessor, ValidityResult
from preference_groups import validity


def test_no_change_returns_value():
    assert validity.NO_CHANGE("x") == "x"


def test_comparisons():
    assert validity.greater_than(3)(4) == 4
    with pytest.raises(SetValueError) as exc:
        validity.greater_than(3)(3)
    assert exc.value.step is SetValueStep.VALIDITY_CHECK
    assert isinstance(exc.value.cause, ValueError)

    assert validity.less_than_or_equal_to(5)(5) == 5
    assert validity.in_range(1, 10)(10) == 10
    with pytest.raises(SetValueError):
        validity.in_range(1, 10)(11)
    with pytest.raises(ValueError):
        validity.in_range(10, 1)


def test_string_processors():
    assert validity.pre_trim()("  a  ") == "a"
    with pytest.raises(SetValueError):
        validity.ensure_not_empty()("")
    with pytest.raises(SetValueError):
        validity.ensure_not_blank()("   ")
    assert validity.ensure_not_blank_and_post_trim()("  a ") == "a"


def test_pre_failure_reports_pre_step():
    proc = ValidityProcessor(pre=lambda v: ValidityResult.not_valid("nope"))
    with pytest.raises(SetValueError) as exc:
        proc("x")
    assert exc.value.step is SetValueStep.PRE_PROCESSING
    assert str(exc.value) == "nope"


def test_stage_exceptions_are_wrapped():
    def boom(value):
        raise KeyError("bad")

    with pytest.raises(SetValueError) as exc:
        ValidityProcessor(post=boom)("x")
    assert exc.value.step is SetValueStep.POST_PROCESSING
    assert isinstance(exc.value.cause, KeyError)


def test_boolean_stages():
    proc = ValidityProcessor(is_valid=lambda v: v % 2 == 0)
    assert proc(4) == 4
    with pytest.raises(SetValueError):
        proc(3)


def test_then_chains_stage_by_stage():
    proc = validity.pre_trim().then(validity.ensure_not_empty())
    assert proc(" a ") == "a"
    with pytest.raises(SetValueError):
        proc("   ")

    bounded = validity.greater_than(0).then(validity.less_than(10))
    assert bounded(5) == 5
    with pytest.raises(SetValueError):
        bounded(10)


def test_none_processor_is_rejected():
    with pytest.raises(TypeError):
        validity.coalesce(None)
    with pytest.raises(TypeError):
        validity.NO_CHANGE.then(None)
    with pytest.raises(TypeError):
        ValidityProcessor(pre="not callable")
