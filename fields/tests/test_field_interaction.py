"""
fields/tests/test_field_interaction.py

Drag/resize state machine: listeners are attached and detached in pairs.
"""
from __future__ import annotations

import unittest

from documents.exceptions.errors import InteractionError
from fields.logic.field_interaction import FieldInteraction, InteractionState, PointerEvent, PointerEvents
from fields.models.field_type import FieldType
from fields.models.page_geometry import PageDimensions
from fields.models.signature_field import SignatureField

DIMS = PageDimensions(1000, 500)
FIELD = SignatureField(id="f1", recipient_id="r1", page=1, x=0.1, y=0.1, width=0.2, height=0.1,
                       type=FieldType.SIGNATURE)


class TestFieldInteraction(unittest.TestCase):
    def setUp(self) -> None:
        self.events = PointerEvents()
        self.updates: list[tuple[str, dict]] = []
        self.fi = FieldInteraction(self.events, lambda fid, geo: self.updates.append((fid, geo)))

    def test_drag_emits_position_and_releases_on_up(self) -> None:
        self.fi.begin_drag(FIELD, 100, 100, DIMS)
        self.assertEqual(self.fi.state, InteractionState.DRAGGING)
        self.assertEqual(self.events.listener_count, 1)

        self.events.emit(PointerEvent("move", 200, 150))
        fid, geo = self.updates[-1]
        self.assertEqual(fid, "f1")
        self.assertAlmostEqual(geo["x"], 0.2)
        self.assertAlmostEqual(geo["y"], 0.2)
        self.assertEqual(set(geo), {"x", "y"})

        self.events.emit(PointerEvent("up", 200, 150))
        self.assertEqual(self.fi.state, InteractionState.IDLE)
        self.assertEqual(self.events.listener_count, 0)

        # no further updates once released
        self.events.emit(PointerEvent("move", 500, 500))
        self.assertEqual(len(self.updates), 1)

    def test_resize_respects_minimum(self) -> None:
        self.fi.begin_resize(FIELD, 0, 0, DIMS)
        self.events.emit(PointerEvent("move", -900, -900))
        _, geo = self.updates[-1]
        self.assertEqual(geo, {"width": 0.05, "height": 0.03})
        self.fi.release()
        self.assertEqual(self.events.listener_count, 0)

    def test_second_gesture_while_active_is_rejected(self) -> None:
        self.fi.begin_drag(FIELD, 0, 0, DIMS)
        with self.assertRaises(InteractionError):
            self.fi.begin_resize(FIELD, 0, 0, DIMS)
        self.assertEqual(self.events.listener_count, 1)

    def test_repeated_gestures_never_leak_listeners(self) -> None:
        for _ in range(5):
            self.fi.begin_drag(FIELD, 0, 0, DIMS)
            self.events.emit(PointerEvent("up", 0, 0))
            self.fi.release()
        self.assertEqual(self.events.listener_count, 0)

    def test_dimension_change_mid_gesture(self) -> None:
        self.fi.begin_drag(FIELD, 0, 0, DIMS)
        self.fi.update_dimensions(PageDimensions(2000, 1000))
        self.events.emit(PointerEvent("move", 200, 100))
        _, geo = self.updates[-1]
        self.assertAlmostEqual(geo["x"], 0.2)
        self.assertAlmostEqual(geo["y"], 0.2)


if __name__ == "__main__":
    unittest.main()
