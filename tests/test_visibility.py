"""
Unit Tests for conditional field visibility

Pure decisions (plan_visibility / updated_flags) plus the widget flag writer
working on a real template.
"""
import io

import pytest
from pypdf import PdfReader, PdfWriter

from sanad.common.models import PaymentMethod
from sanad.rendering.fields import CHEQUE_GROUP, TRANSFER_GROUP
from sanad.rendering.forms import iter_widgets, set_visibility
from sanad.rendering.visibility import (
    FLAG_HIDDEN,
    FLAG_NOVIEW,
    FLAG_PRINT,
    plan_visibility,
    updated_flags,
)


# ============================================================================
# TEST: PLAN
# ============================================================================

class TestPlanVisibility:

    @pytest.mark.parametrize("raw", ["cash", "", None, "crypto"])
    def test_cash_and_unknown_hide_both_groups(self, raw):
        plan = plan_visibility(raw)

        assert plan.method == PaymentMethod.CASH
        assert not plan.cheque_visible
        assert not plan.transfer_visible
        assert plan.hidden == frozenset(CHEQUE_GROUP + TRANSFER_GROUP)

    def test_cheque_shows_only_cheque_group(self):
        plan = plan_visibility("check")

        assert plan.cheque_visible and not plan.transfer_visible
        assert all(plan.is_visible(name) for name in CHEQUE_GROUP)
        assert not any(plan.is_visible(name) for name in TRANSFER_GROUP)

    def test_transfer_shows_only_transfer_group(self):
        plan = plan_visibility("bank_transfer")

        assert plan.transfer_visible and not plan.cheque_visible
        assert all(plan.is_visible(name) for name in TRANSFER_GROUP)
        assert not any(plan.is_visible(name) for name in CHEQUE_GROUP)

    def test_groups_are_never_both_visible(self):
        for raw in ("cash", "check", "bank_transfer", "other"):
            plan = plan_visibility(raw)
            assert not (plan.cheque_visible and plan.transfer_visible)

    def test_hidden_values_are_blanked(self):
        plan = plan_visibility("check")
        values = {"Cheque_Number": "555", "Transfer_Number": "TR-9", "Total": "10.00"}

        result = plan.apply_to_values(values)

        assert result["Cheque_Number"] == "555"
        assert result["Transfer_Number"] == ""
        assert result["Total"] == "10.00"
        assert values["Transfer_Number"] == "TR-9"


# ============================================================================
# TEST: FLAGS
# ============================================================================

class TestUpdatedFlags:

    def test_unflagged_widget_becomes_printable(self):
        assert updated_flags(0, True) == FLAG_PRINT

    def test_hide_sets_hidden_and_keeps_print(self):
        assert updated_flags(FLAG_PRINT, False) == FLAG_PRINT | FLAG_HIDDEN

    def test_show_clears_hidden_and_noview(self):
        assert updated_flags(FLAG_PRINT | FLAG_HIDDEN | FLAG_NOVIEW, True) == FLAG_PRINT


class TestSetVisibility:

    def test_flags_written_on_template_widgets(self, template_path):
        writer = PdfWriter(clone_from=PdfReader(template_path))
        visible = {name: False for name in CHEQUE_GROUP}
        visible.update({name: True for name in TRANSFER_GROUP})

        updated = set_visibility(writer, visible)

        buffer = io.BytesIO()
        writer.write(buffer)
        page = PdfReader(io.BytesIO(buffer.getvalue())).pages[0]
        flags = {name: int(annot.get("/F", 0)) for name, annot in iter_widgets(page)}

        assert updated == len(CHEQUE_GROUP) + len(TRANSFER_GROUP)
        assert all(flags[name] & FLAG_HIDDEN for name in CHEQUE_GROUP)
        assert not any(flags[name] & FLAG_HIDDEN for name in TRANSFER_GROUP)
