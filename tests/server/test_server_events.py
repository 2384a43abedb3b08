import datetime as dt
import json
import unittest

from server.events import StickyEventStore, make_event


class ServerEventsTests(unittest.TestCase):
    def test_make_event_serializes_timestamp_and_payload(self) -> None:
        now = dt.datetime(2026, 2, 21, 10, 0, tzinfo=dt.timezone.utc)
        raw = make_event("session", now_fn=lambda: now, state="running", display="04:59")
        payload = json.loads(raw)

        self.assertEqual("session", payload["type"])
        self.assertEqual(now.isoformat(), payload["timestamp"])
        self.assertEqual("running", payload["state"])
        self.assertEqual("04:59", payload["display"])

    def test_sticky_store_ignores_non_sticky_events(self) -> None:
        store = StickyEventStore()
        store.remember("hello", '{"type":"hello"}')
        store.remember("error", '{"type":"error"}')
        self.assertEqual([], store.snapshot())

    def test_sticky_store_snapshot_follows_stable_order(self) -> None:
        store = StickyEventStore()
        store.remember("completion", '{"type":"completion","n":1}')
        store.remember("session", '{"type":"session","n":2}')

        decoded_types = [json.loads(item)["type"] for item in store.snapshot()]
        self.assertEqual(["session", "completion"], decoded_types)

    def test_sticky_store_overwrites_latest_event_by_type(self) -> None:
        store = StickyEventStore()
        store.remember("session", '{"type":"session","remaining_seconds":10}')
        store.remember("session", '{"type":"session","remaining_seconds":9}')
        snapshot = store.snapshot()

        self.assertEqual(1, len(snapshot))
        self.assertEqual(9, json.loads(snapshot[0])["remaining_seconds"])

    def test_accepted_start_cancel_and_acknowledge_clear_completion(self) -> None:
        for action in ("start", "cancel", "acknowledge"):
            with self.subTest(action=action):
                store = StickyEventStore()
                store.remember("session", make_event("session", action="completed"))
                store.remember("completion", make_event("completion", title="Done"))

                store.remember("session", make_event("session", action=action, accepted=True))

                decoded = [json.loads(item) for item in store.snapshot()]
                self.assertEqual(["session"], [item["type"] for item in decoded])
                self.assertEqual(action, decoded[0]["action"])

    def test_completion_survives_ticks_and_rejected_commands(self) -> None:
        store = StickyEventStore()
        store.remember("completion", make_event("completion", title="Done"))

        store.remember("session", make_event("session", action="completed"))
        store.remember("session", make_event("session", action="pause", accepted=False))
        store.remember("session", make_event("session", action="cancel", accepted=False))

        decoded_types = [json.loads(item)["type"] for item in store.snapshot()]
        self.assertEqual(["session", "completion"], decoded_types)


if __name__ == "__main__":
    unittest.main()
