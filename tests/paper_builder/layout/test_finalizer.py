"""
Unit tests for page-number stamping.
"""

import pytest

from exam_toolkit.paper_builder.config import LayoutConfig
from exam_toolkit.paper_builder.layout import PageBuilder, RuleLine, stamp_page_numbers
from exam_toolkit.paper_builder.layout.finalizer import footer_text


class TestStampPageNumbers:
    def test_footers_are_contiguous(self):
        config = LayoutConfig()
        pages = [PageBuilder(index=i) for i in range(3)]

        plans = stamp_page_numbers(pages, config)

        assert [p.footer.text for p in plans] == ["Page 1 of 3", "Page 2 of 3", "Page 3 of 3"]
        assert [p.number for p in plans] == [1, 2, 3]

    def test_footer_is_centred_below_content(self):
        config = LayoutConfig()

        footer = stamp_page_numbers([PageBuilder(index=0)], config)[0].footer

        assert footer.align == "center"
        assert footer.x == config.page_width / 2
        assert footer.baseline == pytest.approx(config.page_height - config.footer_offset)
        assert footer.top > config.content_bottom
        assert footer.style.font_size == config.footer_font_size

    def test_primitives_are_frozen_in_order(self):
        page = PageBuilder(index=0)
        rules = [page.add(RuleLine(x1=20, x2=190, y=y)) for y in (30, 40, 50)]

        plan = stamp_page_numbers([page], LayoutConfig())[0]

        assert plan.primitives == tuple(rules)
        assert plan.rules == rules

    def test_out_of_order_pages_raise(self):
        with pytest.raises(ValueError):
            stamp_page_numbers([PageBuilder(index=1)], LayoutConfig())


def test_footer_text():
    assert footer_text(2, 5) == "Page 2 of 5"
