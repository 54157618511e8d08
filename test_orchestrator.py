import unittest
from datetime import datetime, timezone
from unittest import mock

from ai_changelog import AIService
from context import RunContext
from data_sources.github_api import GitHubAPIDataSource
from errors import ConfigurationError, EmptyResponseError
from llm.greptile_provider import GreptileProvider
from llm.mock_provider import MockProvider
from notifiers.publish_notifier import PublishNotifier
from orchestrator import ChangelogOrchestrator, build_warning_message
from fakes import (
    FakeGitHubSession,
    FakePostSession,
    FakeResponse,
    make_commit_payload,
    make_config,
)

REPO_URL = "https://github.com/facebook/react"
START = datetime(2024, 10, 1, tzinfo=timezone.utc)
END = datetime(2024, 10, 31, 23, 59, 59, tzinfo=timezone.utc)


def make_context(config, **kwargs):
    return RunContext(
        repo_url=REPO_URL,
        start_date=START,
        end_date=END,
        global_config=config,
        **kwargs,
    )


class TestChangelogOrchestrator(unittest.TestCase):

    def make_orchestrator(self, commits, config=None, **kwargs):
        config = config or make_config()
        session = FakeGitHubSession(commits)
        data_source = GitHubAPIDataSource(config, session=session)
        orchestrator = ChangelogOrchestrator(
            make_context(config), data_source=data_source, **kwargs
        )
        return orchestrator, session

    def test_mock_end_to_end(self):
        commits = [make_commit_payload(1, additions=10, deletions=3), make_commit_payload(2, additions=2, deletions=4)]
        orchestrator, _ = self.make_orchestrator(commits, notifiers=[])

        self.assertIsInstance(orchestrator.ai_service.provider, MockProvider)
        changelog = orchestrator.run()

        self.assertTrue(changelog.startswith("LLM DISABLED - Sample Changelog"))
        self.assertIn("- 12 additions", changelog)
        self.assertIn("- 7 deletions", changelog)
        self.assertIn("- Net change: 5 lines", changelog)
        self.assertIn("- Total commits analyzed: 2", changelog)
        self.assertIn("Commit: " + commits[0]["sha"][:7], changelog)
        self.assertNotIn("Generated with", changelog)

    def test_no_ai_forces_mock(self):
        config = make_config(ENABLE_OPENAI=True, OPENAI_API_KEY="sk-test")
        orchestrator = ChangelogOrchestrator(
            make_context(config, no_ai=True),
            data_source=mock.Mock(),
            notifiers=[],
        )
        self.assertIsInstance(orchestrator.ai_service.provider, MockProvider)

    def test_warning_is_prepended_at_ceiling(self):
        config = make_config(MAX_TOTAL_COMMITS=20)
        commits = [make_commit_payload(i) for i in range(25)]
        orchestrator, session = self.make_orchestrator(commits, config=config, notifiers=[])

        changelog = orchestrator.run()

        self.assertTrue(changelog.startswith(build_warning_message(20)))
        self.assertIn("first 20 commits", changelog)
        self.assertIn("- Total commits analyzed: 20", changelog)
        self.assertEqual(len(session.detail_calls), 20)

    def test_default_warning_text(self):
        self.assertEqual(
            build_warning_message(3000),
            "⚠️ Note: This changelog only includes the first 3000 commits due to GitHub API limitations.\n"
            "The actual number of changes during this period may be larger.\n\n",
        )

    def test_no_warning_below_ceiling(self):
        orchestrator, _ = self.make_orchestrator([make_commit_payload(1)], notifiers=[])
        self.assertFalse(orchestrator.run().startswith("⚠️"))

    def test_diff_text_sent_to_provider_is_truncated(self):
        config = make_config(MAX_TOKENS=250, CHARS_PER_TOKEN=4)
        files = [{"filename": "big.py", "patch": "+" + "x" * 5000}]
        commits = [make_commit_payload(i, files=files) for i in range(10)]
        provider = mock.Mock(display_name=None)
        provider.generate_changelog.return_value = "Features:\n- x"
        ai_service = AIService(config, "facebook/react", provider=provider)
        orchestrator, _ = self.make_orchestrator(
            commits, config=config, ai_service=ai_service, notifiers=[]
        )

        orchestrator.run()

        diff_text, summary, repo_name = provider.generate_changelog.call_args.args
        self.assertLessEqual(len(diff_text), 1000)
        self.assertEqual(summary.total_commits, 10)
        self.assertEqual(repo_name, "facebook/react")

    def test_empty_provider_response_aborts_before_publish(self):
        config = make_config(ENABLE_GREPTILE=True, GREPTILE_API_KEY="gk-test")
        provider = GreptileProvider(
            config, session=FakePostSession(FakeResponse({"message": ""}))
        )
        notifier = mock.Mock()
        orchestrator, _ = self.make_orchestrator(
            [make_commit_payload(1)],
            config=config,
            ai_service=AIService(config, "facebook/react", provider=provider),
            notifiers=[notifier],
        )

        with self.assertRaises(EmptyResponseError):
            orchestrator.run()
        notifier.send.assert_not_called()

    def test_publish_failure_does_not_affect_result(self):
        config = make_config(PUBLISH_BASE_URL="https://gramaphone.test", SHOULD_PUBLISH=True)
        post_session = FakePostSession(FakeResponse({}, status_code=500, text="down"))
        context = make_context(config)
        notifier = PublishNotifier(context, session=post_session)
        orchestrator = ChangelogOrchestrator(
            context,
            data_source=GitHubAPIDataSource(
                config, session=FakeGitHubSession([make_commit_payload(1)])
            ),
            notifiers=[notifier],
        )

        changelog = orchestrator.run()

        self.assertTrue(changelog.startswith("LLM DISABLED"))
        (call,) = post_session.calls
        self.assertEqual(call["url"], "https://gramaphone.test/api/changelogs")
        self.assertEqual(call["json"]["content"], changelog)
        self.assertEqual(call["json"]["repoUrl"], REPO_URL)

    def test_notifier_exception_is_contained(self):
        notifier = mock.Mock()
        notifier.name = "broken"
        notifier.send.side_effect = RuntimeError("boom")
        orchestrator, _ = self.make_orchestrator(
            [make_commit_payload(1)], notifiers=[notifier]
        )

        changelog = orchestrator.run()

        self.assertTrue(changelog.startswith("LLM DISABLED"))
        notifier.send.assert_called_once()

    def test_missing_token_fails_before_network(self):
        config = make_config(GITHUB_TOKEN="")
        with mock.patch("requests.Session.get") as get:
            with self.assertRaises(ConfigurationError):
                ChangelogOrchestrator(make_context(config), notifiers=[])
            get.assert_not_called()

    def test_unconfigured_provider_fails_before_data_source(self):
        config = make_config(ENABLE_OPENAI=True, OPENAI_API_KEY="")
        with mock.patch("orchestrator.get_data_source") as factory:
            with self.assertRaises(ConfigurationError):
                ChangelogOrchestrator(make_context(config), notifiers=[])
            factory.assert_not_called()

    def test_build_metadata(self):
        orchestrator, _ = self.make_orchestrator([], notifiers=[])
        metadata = orchestrator.build_metadata()

        self.assertEqual(metadata["repo"], REPO_URL)
        self.assertEqual(
            metadata["period"],
            {"start": START.isoformat(), "end": END.isoformat()},
        )
        self.assertIn("generatedAt", metadata)


if __name__ == "__main__":
    unittest.main()
