import unittest
from datetime import datetime, timezone

import requests

from context import RunContext
from notifiers.factory import get_active_notifiers
from notifiers.publish_notifier import PublishNotifier
from fakes import FakePostSession, FakeResponse, make_config

METADATA = {
    "generatedAt": "2024-11-01T00:00:00+00:00",
    "repo": "https://github.com/facebook/react",
    "period": {"start": "2024-10-01T00:00:00+00:00", "end": "2024-10-31T00:00:00+00:00"},
}


def make_context(publish=False, **overrides):
    return RunContext(
        repo_url="https://github.com/facebook/react",
        start_date=datetime(2024, 10, 1, tzinfo=timezone.utc),
        end_date=datetime(2024, 10, 31, tzinfo=timezone.utc),
        publish=publish,
        global_config=make_config(**overrides),
    )


class TestPublishNotifier(unittest.TestCase):

    def test_enabled_only_with_target_and_request(self):
        cases = [
            # (base_url, should_publish, --publish, expected)
            ("", True, True, False),
            ("https://gramaphone.test", False, False, False),
            ("https://gramaphone.test", True, False, True),
            ("https://gramaphone.test", False, True, True),
        ]
        for base_url, should_publish, publish, expected in cases:
            with self.subTest(base_url=base_url, should_publish=should_publish, publish=publish):
                context = make_context(
                    publish=publish, PUBLISH_BASE_URL=base_url, SHOULD_PUBLISH=should_publish
                )
                notifier = PublishNotifier(context, session=FakePostSession())
                self.assertEqual(notifier.is_enabled(), expected)

    def test_payload(self):
        session = FakePostSession()
        context = make_context(PUBLISH_BASE_URL="https://gramaphone.test/")
        notifier = PublishNotifier(context, session=session)

        self.assertTrue(notifier.send("Features:\n- A", METADATA))

        (call,) = session.calls
        self.assertEqual(call["url"], "https://gramaphone.test/api/changelogs")
        self.assertEqual(
            call["json"],
            {
                "repoUrl": "https://github.com/facebook/react",
                "content": "Features:\n- A",
                "metadata": {
                    "generatedAt": METADATA["generatedAt"],
                    "period": METADATA["period"],
                },
            },
        )

    def test_http_error_returns_false(self):
        session = FakePostSession(FakeResponse({}, status_code=500, text="down"))
        notifier = PublishNotifier(
            make_context(PUBLISH_BASE_URL="https://gramaphone.test"), session=session
        )
        self.assertFalse(notifier.send("x", METADATA))

    def test_network_error_returns_false(self):
        session = FakePostSession(exc=requests.ConnectionError("refused"))
        notifier = PublishNotifier(
            make_context(PUBLISH_BASE_URL="https://gramaphone.test"), session=session
        )
        self.assertFalse(notifier.send("x", METADATA))


class TestNotifierFactory(unittest.TestCase):

    def test_inactive_by_default(self):
        self.assertEqual(get_active_notifiers(make_context()), [])

    def test_publish_flag_activates(self):
        context = make_context(publish=True, PUBLISH_BASE_URL="https://gramaphone.test")
        (notifier,) = get_active_notifiers(context)
        self.assertIsInstance(notifier, PublishNotifier)


if __name__ == "__main__":
    unittest.main()
