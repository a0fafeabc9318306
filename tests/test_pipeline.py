"""Tests for the insight pipeline orchestration (all collaborators faked)."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from src.config import Settings
from src.insight.audio import AudioFetcher
from src.insight.errors import (
    AudioExtractionError,
    EmptyTranscriptError,
    InsightValidationError,
    NoAudioAvailableError,
    ResolverError,
    SummarizationError,
    TranscriptionError,
)
from src.insight.models import AuditRecord, EpisodeReference, TranscriptOrigin
from src.insight.orchestrator import (
    MANUAL_MODE_MESSAGE,
    InsightPipeline,
    build_pipeline,
    pipeline_config_from_settings,
)
from src.insight.resolver import EpisodeResolver
from src.insight.speech import SpeechToText, WhisperSpeechService
from src.insight.summarizer import OpenAICompatibleLanguageModel, Summarizer
from src.pipeline_config import AudioFetchStrategy

REFERENCE = EpisodeReference(
    title="How to Focus",
    show_name="Deep Work Radio",
    timestamp_seconds=60,
    source_url="https://open.spotify.com/episode/abc",
)


def search_result(**overrides: object) -> dict:  # type: ignore[type-arg]
    result = {
        "id": "ep1",
        "title_original": "How to Focus (Remastered)",
        "podcast": {"title_original": "Deep Work Radio"},
        "audio": "https://cdn.example.com/ep1.mp3",
        "thumbnail": "https://cdn.example.com/ep1.jpg",
    }
    result.update(overrides)
    return result


class Harness:
    """Pipeline wired to fakes, with handles on every collaborator."""

    def __init__(self, search, executor, audio_dir: Path, transcript_text: str = "spoken words here") -> None:
        self.search = search
        self.executor = executor
        self.audio_dir = audio_dir
        self.speech_service = MagicMock()
        self.speech_service.transcribe.return_value = transcript_text
        self.model = MagicMock()
        self.model.complete.return_value = "- one\n- two\n- three"
        self.audits: list[AuditRecord] = []
        self.pipeline = InsightPipeline(
            resolver=EpisodeResolver(search),
            audio_fetcher=AudioFetcher(executor, audio_dir),
            speech=SpeechToText(self.speech_service),
            summarizer=Summarizer(self.model),
            audit=self.audits.append,
        )

    def leftover_files(self) -> list[Path]:
        if not self.audio_dir.exists():
            return []
        return list(self.audio_dir.iterdir())


@pytest.fixture
def harness(make_search, make_executor, audio_dir):
    def build(search=None, executor=None, **kwargs):
        return Harness(
            search or make_search(results=[search_result()]),
            executor or make_executor(),
            audio_dir,
            **kwargs,
        )

    return build


class TestEmbeddedTranscriptPath:
    def test_skips_audio_and_speech(self, harness, make_search) -> None:
        words = " ".join(f"w{i}" for i in range(1000))
        h = harness(search=make_search(results=[search_result(transcript="yes")], transcript=words))

        result = h.pipeline.run(REFERENCE)

        assert result.transcript_origin is TranscriptOrigin.EMBEDDED
        assert result.transcript is not None
        assert result.transcript.split()[0] == "w125"
        assert result.summary == ["one", "two", "three"]
        assert h.executor.commands == []
        h.speech_service.transcribe.assert_not_called()

    def test_empty_window_falls_back_to_audio(self, harness, make_search) -> None:
        h = harness(search=make_search(results=[search_result(transcript="yes")], transcript="too short"))
        result = h.pipeline.run(REFERENCE)
        assert result.transcript_origin is TranscriptOrigin.TRANSCRIBED
        assert result.transcript == "spoken words here"

    def test_transcript_fetch_failure_falls_back_to_audio(self, harness, make_search) -> None:
        search = make_search(results=[search_result(transcript="yes")], transcript=RuntimeError("boom"))
        result = harness(search=search).pipeline.run(REFERENCE)
        assert result.transcript_origin is TranscriptOrigin.TRANSCRIBED


class TestAudioPath:
    def test_transcribes_snippet(self, harness) -> None:
        h = harness()
        result = h.pipeline.run(REFERENCE)

        assert result.manual_mode is False
        assert result.transcript == "spoken words here"
        assert result.transcript_origin is TranscriptOrigin.TRANSCRIBED
        assert result.thumbnail_url == "https://cdn.example.com/ep1.jpg"
        assert h.executor.binaries() == ["curl", "ffmpeg"]
        assert h.leftover_files() == []

    def test_caller_title_is_authoritative(self, harness) -> None:
        h = harness()
        result = h.pipeline.run(REFERENCE)
        assert result.episode_title == "How to Focus"
        assert result.show_name == "Deep Work Radio"
        _, prompt = h.model.complete.call_args.args
        assert '"How to Focus"' in prompt

    def test_show_falls_back_to_resolved_name(self, harness) -> None:
        ref = EpisodeReference(title="How to Focus", show_name=None, timestamp_seconds=60)
        assert harness().pipeline.run(ref).show_name == "Deep Work Radio"

    def test_no_audio_url(self, harness, make_search) -> None:
        h = harness(search=make_search(results=[search_result(audio=None)]))
        with pytest.raises(NoAudioAvailableError) as exc_info:
            h.pipeline.run(REFERENCE)
        assert exc_info.value.status_code == 404
        assert h.executor.commands == []

    def test_empty_transcription(self, harness) -> None:
        h = harness(transcript_text="   ")
        with pytest.raises(EmptyTranscriptError):
            h.pipeline.run(REFERENCE)
        h.model.complete.assert_not_called()
        assert h.leftover_files() == []


class TestNotFound:
    def test_manual_mode(self, harness, make_search) -> None:
        h = harness(search=make_search(results=[]))
        result = h.pipeline.run(REFERENCE)

        assert result.manual_mode is True
        assert result.message == MANUAL_MODE_MESSAGE
        assert result.transcript is None
        assert result.summary is None
        assert result.show_name == "Deep Work Radio"
        h.speech_service.transcribe.assert_not_called()
        h.model.complete.assert_not_called()
        assert [a.outcome for a in h.audits] == ["not_found"]

    def test_unknown_show(self, harness, make_search) -> None:
        ref = EpisodeReference(title="Mystery", show_name=None, timestamp_seconds=0)
        result = harness(search=make_search(results=[])).pipeline.run(ref)
        assert result.show_name == "Unknown Show"


class TestFailures:
    def test_resolver_transport_error(self, harness, make_search) -> None:
        h = harness(search=make_search(error=ConnectionError("offline")))
        with pytest.raises(ResolverError):
            h.pipeline.run(REFERENCE)
        assert [a.outcome for a in h.audits] == ["failed"]

    def test_audio_failure_leaves_no_files(self, harness, make_executor) -> None:
        h = harness(executor=make_executor(fail_on="ffmpeg"))
        with pytest.raises(AudioExtractionError):
            h.pipeline.run(REFERENCE)
        assert h.leftover_files() == []
        h.speech_service.transcribe.assert_not_called()

    def test_transcription_failure_releases_snippet(self, harness) -> None:
        h = harness()
        h.speech_service.transcribe.side_effect = TranscriptionError("Failed to transcribe audio")
        with pytest.raises(TranscriptionError):
            h.pipeline.run(REFERENCE)
        assert h.leftover_files() == []

    def test_summarization_failure(self, harness) -> None:
        h = harness()
        h.model.complete.side_effect = SummarizationError("Failed to summarize transcript")
        with pytest.raises(SummarizationError):
            h.pipeline.run(REFERENCE)
        assert h.leftover_files() == []
        assert [a.outcome for a in h.audits] == ["failed"]

    def test_blank_title_makes_no_calls(self, harness) -> None:
        h = harness()
        with pytest.raises(InsightValidationError):
            h.pipeline.run(EpisodeReference(title="  ", show_name=None, timestamp_seconds=0))
        assert h.search.queries == []
        assert h.audits == []


class TestAudit:
    def test_one_record_per_successful_run(self, harness) -> None:
        h = harness()
        h.pipeline.run(REFERENCE)
        assert len(h.audits) == 1
        record = h.audits[0]
        assert record.title == "How to Focus"
        assert record.source_url == "https://open.spotify.com/episode/abc"
        assert record.outcome == "done"

    def test_audit_failure_does_not_change_result(self, make_search, make_executor, audio_dir) -> None:
        speech = MagicMock()
        speech.transcribe.return_value = "words"
        model = MagicMock()
        model.complete.return_value = "- ok"
        pipeline = InsightPipeline(
            resolver=EpisodeResolver(make_search(results=[search_result()])),
            audio_fetcher=AudioFetcher(make_executor(), audio_dir),
            speech=SpeechToText(speech),
            summarizer=Summarizer(model),
            audit=MagicMock(side_effect=RuntimeError("supabase down")),
        )
        assert pipeline.run(REFERENCE).summary == ["ok"]


class TestBuildPipeline:
    def test_config_from_settings(self) -> None:
        settings = Settings(_env_file=None, window_seconds=45, audio_fetch_strategy="ranged_seek")  # type: ignore[call-arg]
        config = pipeline_config_from_settings(settings)
        assert config.window_seconds == 45
        assert config.fetch_strategy is AudioFetchStrategy.RANGED_SEEK

    def test_builds_with_defaults(self) -> None:
        settings = Settings(_env_file=None, groq_api_key="gsk-test")  # type: ignore[call-arg]
        assert isinstance(build_pipeline(settings), InsightPipeline)

    def test_anthropic_and_assemblyai(self) -> None:
        settings = Settings(  # type: ignore[call-arg]
            _env_file=None,
            llm_provider="anthropic",
            stt_provider="assemblyai",
            anthropic_api_key="sk-ant-test",
            assemblyai_api_key="aai-test",
        )
        assert isinstance(build_pipeline(settings), InsightPipeline)

    def test_invalid_provider(self) -> None:
        settings = Settings(_env_file=None, llm_provider="nope", groq_api_key="gsk-test")  # type: ignore[call-arg]
        with pytest.raises(ValueError):
            build_pipeline(settings)

    def test_invalid_speech_provider(self) -> None:
        settings = Settings(_env_file=None, stt_provider="nope", groq_api_key="gsk-test")  # type: ignore[call-arg]
        with pytest.raises(ValueError):
            build_pipeline(settings)

    def test_builds_without_any_keys(self) -> None:
        settings = Settings(  # type: ignore[call-arg]
            _env_file=None,
            groq_api_key="",
            openai_api_key="",
            anthropic_api_key="",
            listennotes_api_key="",
        )
        assert isinstance(build_pipeline(settings), InsightPipeline)


class TestKeylessServices:
    """Pipelines built from real services with no API keys configured."""

    def build(self, search, executor, audio_dir: Path) -> InsightPipeline:
        return InsightPipeline(
            resolver=EpisodeResolver(search),
            audio_fetcher=AudioFetcher(executor, audio_dir),
            speech=SpeechToText(WhisperSpeechService("")),
            summarizer=Summarizer(OpenAICompatibleLanguageModel("")),
        )

    def test_not_found_returns_manual_mode(self, make_search, make_executor, audio_dir) -> None:
        pipeline = self.build(make_search(results=[]), make_executor(), audio_dir)
        result = pipeline.run(REFERENCE)
        assert result.manual_mode is True
        assert result.message == MANUAL_MODE_MESSAGE

    def test_audio_path_reports_missing_key(self, make_search, make_executor, audio_dir) -> None:
        pipeline = self.build(make_search(results=[search_result()]), make_executor(), audio_dir)
        with pytest.raises(TranscriptionError) as exc_info:
            pipeline.run(REFERENCE)
        assert exc_info.value.status_code == 500
        assert exc_info.value.detail == "No speech-to-text API key configured"
        assert list(audio_dir.iterdir()) == []
