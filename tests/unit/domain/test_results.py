"""Tests for encounter_tracker/domain/models/results.py."""

import pytest

from encounter_tracker.domain.models.results import ErrorKind, PagedResult, ServiceResult


# --- ServiceResult ---

def test_success_carries_data():
    result = ServiceResult.success(42)
    assert result.is_success is True
    assert result.data == 42
    assert result.error_kind is ErrorKind.NONE
    assert result.error_message is None


def test_failure_carries_message_and_kind():
    result = ServiceResult.failure("Access denied", ErrorKind.UNAUTHORIZED_ACCESS)
    assert result.is_success is False
    assert result.data is None
    assert result.error_message == "Access denied"
    assert result.error_kind is ErrorKind.UNAUTHORIZED_ACCESS


def test_failure_with_none_kind_raises():
    with pytest.raises(ValueError):
        ServiceResult.failure("oops", ErrorKind.NONE)


def test_unwrap_success_returns_data():
    assert ServiceResult.success("x").unwrap() == "x"


def test_unwrap_failure_raises():
    with pytest.raises(RuntimeError, match="not_found"):
        ServiceResult.failure("missing", ErrorKind.NOT_FOUND).unwrap()


def test_success_may_carry_none_data():
    assert ServiceResult.success(None).is_success is True


# --- PagedResult ---

def test_paged_total_pages_rounds_up():
    assert PagedResult(items=[], total_count=45, page=1, page_size=20).total_pages == 3


def test_paged_total_pages_exact_multiple():
    assert PagedResult(items=[], total_count=40, page=1, page_size=20).total_pages == 2


def test_paged_empty_set_has_zero_pages():
    page = PagedResult(items=[], total_count=0, page=1, page_size=20)
    assert page.total_pages == 0
    assert page.has_next is False
    assert page.has_previous is False


def test_paged_first_page_flags():
    page = PagedResult(items=[], total_count=45, page=1, page_size=20)
    assert page.has_next is True
    assert page.has_previous is False


def test_paged_last_page_flags():
    page = PagedResult(items=[], total_count=45, page=3, page_size=20)
    assert page.has_next is False
    assert page.has_previous is True


def test_paged_page_beyond_end_has_no_next():
    assert PagedResult(items=[], total_count=45, page=9, page_size=20).has_next is False
