import unittest
from types import SimpleNamespace
from unittest import mock

import httpx
import openai
import requests

from errors import EmptyResponseError, ProviderAPIError
from llm.greptile_provider import GreptileProvider
from llm.openai_provider import OpenAIProvider
from fakes import FakePostSession, FakeResponse, make_config, make_summary


def completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class TestOpenAIProvider(unittest.TestCase):

    def setUp(self):
        self.config = make_config(ENABLE_OPENAI=True, OPENAI_API_KEY="sk-test")
        self.provider = OpenAIProvider(self.config)
        self.provider.client = mock.Mock()

    def test_request_contract(self):
        self.provider.client.chat.completions.create.return_value = completion(
            "  Features:\n- Added X  "
        )

        text = self.provider.generate_changelog("DIFF-BODY", make_summary(), "facebook/react")

        self.assertEqual(text, "Features:\n- Added X")
        kwargs = self.provider.client.chat.completions.create.call_args.kwargs
        self.assertEqual(kwargs["model"], self.config.DEFAULT_MODEL_OPENAI)
        self.assertEqual(len(kwargs["messages"]), 1)
        message = kwargs["messages"][0]
        self.assertEqual(message["role"], "user")
        self.assertIn("DIFF-BODY", message["content"])
        self.assertIn("Bug Fixes:", message["content"])
        self.assertIn("numbered list", message["content"])

    def test_empty_content(self):
        self.provider.client.chat.completions.create.return_value = completion("")
        with self.assertRaises(EmptyResponseError) as ctx:
            self.provider.generate_changelog("d", make_summary(), "o/r")
        self.assertIn("No content received", str(ctx.exception))

    def test_whitespace_only_content(self):
        self.provider.client.chat.completions.create.return_value = completion("   \n  ")
        with self.assertRaises(EmptyResponseError):
            self.provider.generate_changelog("d", make_summary(), "o/r")

    def test_none_content(self):
        self.provider.client.chat.completions.create.return_value = completion(None)
        with self.assertRaises(EmptyResponseError):
            self.provider.generate_changelog("d", make_summary(), "o/r")

    def test_no_choices(self):
        self.provider.client.chat.completions.create.return_value = SimpleNamespace(choices=[])
        with self.assertRaises(EmptyResponseError):
            self.provider.generate_changelog("d", make_summary(), "o/r")

    def test_connection_error(self):
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        self.provider.client.chat.completions.create.side_effect = openai.APIConnectionError(
            request=request
        )
        with self.assertRaises(ProviderAPIError):
            self.provider.generate_changelog("d", make_summary(), "o/r")


class TestGreptileProvider(unittest.TestCase):

    def setUp(self):
        self.config = make_config(
            ENABLE_GREPTILE=True, GREPTILE_API_KEY="gk-test", GITHUB_TOKEN="ghp_x"
        )

    def test_request_contract(self):
        session = FakePostSession(FakeResponse({"message": "Features:\n- Y"}))
        provider = GreptileProvider(self.config, session=session)

        text = provider.generate_changelog("DIFF-BODY", make_summary(), "facebook/react")

        self.assertEqual(text, "Features:\n- Y")
        (call,) = session.calls
        self.assertEqual(call["url"], "https://api.greptile.com/v2/query")
        self.assertEqual(call["headers"]["Authorization"], "Bearer gk-test")
        self.assertEqual(call["headers"]["X-Github-Token"], "ghp_x")
        body = call["json"]
        self.assertEqual(body["messages"][0]["role"], "user")
        self.assertIn("DIFF-BODY", body["messages"][0]["content"])
        self.assertEqual(
            body["repositories"],
            [{"remote": "github", "repository": "facebook/react", "branch": "main"}],
        )
        self.assertIs(body["genius"], True)

    def test_empty_message(self):
        session = FakePostSession(FakeResponse({"message": ""}))
        provider = GreptileProvider(self.config, session=session)
        with self.assertRaises(EmptyResponseError):
            provider.generate_changelog("d", make_summary(), "facebook/react")

    def test_missing_message(self):
        session = FakePostSession(FakeResponse({}))
        provider = GreptileProvider(self.config, session=session)
        with self.assertRaises(EmptyResponseError):
            provider.generate_changelog("d", make_summary(), "facebook/react")

    def test_http_error_carries_status(self):
        session = FakePostSession(FakeResponse({}, status_code=500, text="boom"))
        provider = GreptileProvider(self.config, session=session)
        with self.assertRaises(ProviderAPIError) as ctx:
            provider.generate_changelog("d", make_summary(), "facebook/react")
        self.assertEqual(ctx.exception.status_code, 500)
        self.assertEqual(ctx.exception.kind, "provider_api_error")

    def test_network_error(self):
        session = FakePostSession(exc=requests.Timeout("slow"))
        provider = GreptileProvider(self.config, session=session)
        with self.assertRaises(ProviderAPIError):
            provider.generate_changelog("d", make_summary(), "facebook/react")


if __name__ == "__main__":
    unittest.main()
