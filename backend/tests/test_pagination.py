import pytest
from sqlalchemy import select

from building_registry.errors import InvalidInput, PageOutOfRange
from building_registry.models import Region
from building_registry.services.pagination import paginate


def test_offset_and_limit():
    window = paginate(3, 20, 100)
    assert window.offset == 40
    assert window.limit == 20
    assert window.is_out_of_range is False


def test_first_page_of_empty_result_is_in_range():
    window = paginate(1, 10, 0)
    assert window.is_out_of_range is False
    window.ensure_in_range(0)


def test_first_page_covers_short_result():
    window = paginate(1, 10, 5)
    assert window.offset == 0
    assert window.is_out_of_range is False


def test_page_past_last_item_is_out_of_range():
    window = paginate(2, 10, 5)
    assert window.is_out_of_range is True
    with pytest.raises(PageOutOfRange) as exc_info:
        window.ensure_in_range(5)
    assert exc_info.value.page == 2
    assert exc_info.value.total == 5


def test_exact_boundary():
    assert paginate(2, 10, 20).is_out_of_range is False
    assert paginate(3, 10, 20).is_out_of_range is True


def test_later_page_of_empty_result_is_not_out_of_range():
    assert paginate(2, 10, 0).is_out_of_range is False


@pytest.mark.parametrize("page", [0, -1])
def test_page_must_be_positive(page):
    with pytest.raises(InvalidInput) as exc_info:
        paginate(page, 10, 5)
    assert exc_info.value.field == "page"


@pytest.mark.parametrize("page_size", [0, 101])
def test_page_size_bounds(page_size):
    with pytest.raises(InvalidInput) as exc_info:
        paginate(1, page_size, 5)
    assert exc_info.value.field == "pageSize"


def test_custom_max_page_size():
    assert paginate(1, 500, 1000, max_page_size=500).limit == 500


def test_apply_adds_offset_and_limit():
    query = paginate(2, 25, 100).apply(select(Region))
    sql = str(query.compile(compile_kwargs={"literal_binds": True}))
    assert "LIMIT 25 OFFSET 25" in sql
