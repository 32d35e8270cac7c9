"""End-to-end tests for ReviewOrchestrator.run()."""
from unittest.mock import MagicMock

import pytest
import requests

from helpers import make_config, make_response
from review_bot.models import DiffItem, GenerationResult, PublishResult, RunStatus
from review_bot.orchestrator.exceptions import ReviewRunError
from review_bot.orchestrator.runner import ReviewOrchestrator, create_components
from review_bot.pipeline.comment_publisher import CommentPublisher
from review_bot.pipeline.diff_collector import DiffCollector
from review_bot.pipeline.exceptions import (
    ConfigurationError,
    DiffDiscoveryError,
    ServiceConnectionError,
)
from review_bot.pipeline.generation_client import GenerationClient


def _collector(items):
    collector = MagicMock()
    collector.collect.return_value = items
    return collector


def _client(fail_paths=(), items=()):
    failing = {item.context for item in items if item.path in fail_paths}
    client = MagicMock()
    client.check_connection.return_value = 3.0

    def generate(context, system_prompt=None):
        if context in failing:
            raise RuntimeError("AI service error: model not found")
        return GenerationResult(text="Solid change.")

    client.generate.side_effect = generate
    return client


def _publisher():
    publisher = MagicMock()
    publisher.publish.return_value = PublishResult(id="77")
    return publisher


class TestRunOutcomes:
    def test_all_files_succeed(self, config, diff_items, no_sleep):
        orchestrator = ReviewOrchestrator(
            config,
            client=_client(),
            collector=_collector(diff_items),
            publisher=_publisher(),
            sleep=no_sleep,
        )
        outcome = orchestrator.run()

        assert outcome.success_count == 3
        assert outcome.status == RunStatus.SUCCESS

    def test_partial_failure_does_not_raise(self, config, diff_items, no_sleep):
        """Three files, one fails: the run still succeeds."""
        publisher = _publisher()
        orchestrator = ReviewOrchestrator(
            config,
            client=_client({"src/util.py"}, diff_items),
            collector=_collector(diff_items),
            publisher=publisher,
            sleep=no_sleep,
        )
        outcome = orchestrator.run()

        assert outcome.success_count == 2
        assert outcome.error_count == 1
        assert outcome.failed_paths == ["src/util.py"]
        assert outcome.status == RunStatus.PARTIAL_FAILURE
        assert publisher.publish.call_count == 2

    def test_total_failure_raises(self, config, diff_items, no_sleep):
        paths = {item.path for item in diff_items}
        orchestrator = ReviewOrchestrator(
            config,
            client=_client(paths, diff_items),
            collector=_collector(diff_items),
            publisher=_publisher(),
            sleep=no_sleep,
        )
        with pytest.raises(ReviewRunError, match="All 3 files failed") as exc_info:
            orchestrator.run()

        assert exc_info.value.outcome.success_count == 0
        assert exc_info.value.outcome.error_count == 3

    def test_nothing_to_review_is_success(self, config, no_sleep):
        client = _client()
        orchestrator = ReviewOrchestrator(
            config, client=client, collector=_collector([]), publisher=_publisher(), sleep=no_sleep
        )
        outcome = orchestrator.run()

        assert outcome.total_count == 0
        assert outcome.status == RunStatus.SUCCESS
        client.generate.assert_not_called()


class TestFatalErrors:
    def test_unreachable_service_aborts_before_collection(self, config, diff_items, no_sleep):
        client = _client()
        client.check_connection.side_effect = ServiceConnectionError("Connection refused")
        collector = _collector(diff_items)
        orchestrator = ReviewOrchestrator(
            config, client=client, collector=collector, publisher=_publisher(), sleep=no_sleep
        )

        with pytest.raises(ServiceConnectionError):
            orchestrator.run()
        collector.collect.assert_not_called()

    def test_discovery_failure_propagates(self, config, no_sleep):
        collector = MagicMock()
        collector.collect.side_effect = DiffDiscoveryError("Failed to list changed files")
        orchestrator = ReviewOrchestrator(
            config, client=_client(), collector=collector, publisher=_publisher(), sleep=no_sleep
        )
        with pytest.raises(DiffDiscoveryError):
            orchestrator.run()


class TestWithRealComponents:
    """Real client and publisher over a mocked HTTP session."""

    def test_local_log_run(self, config, mock_session, no_sleep):
        """Every comment goes to the log when no pull-request number is set."""
        items = [DiffItem(path="a.py", context="+a = 1\n"), DiffItem(path="b.py", context="+b = 2\n")]

        def respond(method, url, **kwargs):
            if url.endswith("/api/tags"):
                return make_response(json_body={"models": [{"name": "codellama"}]})
            return make_response(json_body={"response": f"Reviewed {kwargs['json']['prompt']}"})

        mock_session.request.side_effect = respond
        client = GenerationClient(host=config.host, model=config.model, session=mock_session, sleep=no_sleep)
        publisher = CommentPublisher(session=mock_session, sleep=no_sleep)

        outcome = ReviewOrchestrator(
            config, client=client, collector=_collector(items), publisher=publisher, sleep=no_sleep
        ).run()

        assert outcome.success_count == 2
        urls = [c.args[1] for c in mock_session.request.call_args_list]
        assert urls == [
            "http://ollama.test:11434/api/tags",
            "http://ollama.test:11434/api/generate",
            "http://ollama.test:11434/api/generate",
        ]

    def test_model_not_found_fails_every_file(self, config, mock_session, no_sleep):
        items = [DiffItem(path="a.py", context="+a = 1\n")]

        def respond(method, url, **kwargs):
            if url.endswith("/api/tags"):
                return make_response(json_body={"models": []})
            return make_response(json_body={"error": "model not found"})

        mock_session.request.side_effect = respond
        client = GenerationClient(host=config.host, model=config.model, session=mock_session, sleep=no_sleep)
        orchestrator = ReviewOrchestrator(
            config,
            client=client,
            collector=_collector(items),
            publisher=CommentPublisher(session=mock_session, sleep=no_sleep),
            sleep=no_sleep,
        )

        with pytest.raises(ReviewRunError) as exc_info:
            orchestrator.run()

        assert exc_info.value.outcome.failed_paths == ["a.py"]
        assert exc_info.value.connectivity_failure is False
        generate_calls = [c for c in mock_session.request.call_args_list if c.args[1].endswith("/api/generate")]
        assert len(generate_calls) == 2

    def test_one_file_fails_after_retries(self, config, mock_session, no_sleep):
        """Three files, generation fails twice for one of them: the run completes."""
        items = [
            DiffItem(path="a.py", context="+a = 1\n"),
            DiffItem(path="b.py", context="+b = 2\n"),
            DiffItem(path="c.py", context="+c = 3\n"),
        ]

        def respond(method, url, **kwargs):
            if url.endswith("/api/tags"):
                return make_response(json_body={"models": []})
            if kwargs["json"]["prompt"] == "+b = 2":
                return make_response(
                    status_code=500, json_body={"error": "overloaded"}, reason="Internal Server Error"
                )
            return make_response(json_body={"response": "Fine."})

        mock_session.request.side_effect = respond
        client = GenerationClient(host=config.host, model=config.model, session=mock_session, sleep=no_sleep)
        orchestrator = ReviewOrchestrator(
            config,
            client=client,
            collector=_collector(items),
            publisher=CommentPublisher(session=mock_session, sleep=no_sleep),
            sleep=no_sleep,
        )

        outcome = orchestrator.run()

        assert outcome.success_count == 2
        assert outcome.failed_paths == ["b.py"]
        failing_posts = [
            c for c in mock_session.request.call_args_list
            if c.args[1].endswith("/api/generate") and c.kwargs["json"]["prompt"] == "+b = 2"
        ]
        assert len(failing_posts) == 2

    def test_unreachable_service_during_review_is_flagged(self, config, mock_session, no_sleep):
        items = [DiffItem(path="a.py", context="+a = 1\n"), DiffItem(path="b.py", context="+b = 2\n")]

        def respond(method, url, **kwargs):
            if url.endswith("/api/tags"):
                return make_response(json_body={"models": []})
            raise requests.exceptions.ReadTimeout("read timed out")

        mock_session.request.side_effect = respond
        client = GenerationClient(host=config.host, model=config.model, session=mock_session, sleep=no_sleep)
        orchestrator = ReviewOrchestrator(
            config,
            client=client,
            collector=_collector(items),
            publisher=CommentPublisher(session=mock_session, sleep=no_sleep),
            sleep=no_sleep,
        )

        with pytest.raises(ReviewRunError) as exc_info:
            orchestrator.run()

        assert exc_info.value.connectivity_failure is True
        assert exc_info.value.outcome.error_count == 2


class TestCreateComponents:
    def test_builds_components_from_config(self):
        config = make_config(
            pull_request_number="9",
            github_token="ghp_x",
            review_pull_request=True,
            base_ref="develop",
            generation_max_attempts=4,
        )
        components = create_components(config)

        assert isinstance(components["client"], GenerationClient)
        assert components["client"].max_attempts == 4
        assert isinstance(components["collector"], DiffCollector)
        assert components["collector"].base_ref == "develop"
        assert components["collector"].review_pull_request is True
        assert isinstance(components["publisher"], CommentPublisher)
        assert components["publisher"].endpoint.endswith("/repos/octo/widgets/issues/9/comments")

    def test_incomplete_publish_target(self):
        config = make_config()
        # Bypass config validation to exercise the publisher's own check
        config = config.model_copy(update={"pull_request_number": "9"})
        with pytest.raises(ConfigurationError):
            create_components(config)
