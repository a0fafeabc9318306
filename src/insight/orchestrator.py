"""Insight pipeline: resolve -> (segment | extract + transcribe) -> summarize.

The hybrid strategy prefers a transcript the search service already has and
only falls back to downloading and transcribing audio when that fails. A
run is strictly sequential; each stage consumes the previous stage's output.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum

from src.config import Settings
from src.insight import segmenter
from src.insight.audio import AudioFetcher
from src.insight.commands import SubprocessExecutor
from src.insight.errors import (
    EmptyTranscriptError,
    InsightError,
    InsightValidationError,
    NoAudioAvailableError,
)
from src.insight.models import (
    AuditRecord,
    EpisodeMatch,
    EpisodeReference,
    InsightResult,
    TranscriptOrigin,
    TranscriptSegment,
)
from src.insight.resolver import EpisodeResolver, ListenNotesSearch
from src.insight.speech import (
    AssemblyAISpeechService,
    SpeechToText,
    SpeechToTextService,
    WhisperSpeechService,
)
from src.insight.summarizer import (
    AnthropicLanguageModel,
    LanguageModelService,
    OpenAICompatibleLanguageModel,
    Summarizer,
)
from src.pipeline_config import AudioFetchStrategy, LLMProvider, PipelineConfig, SpeechProvider

logger = logging.getLogger(__name__)

UNKNOWN_SHOW = "Unknown Show"
MANUAL_MODE_MESSAGE = "Podcast not found in database. You can add your own notes!"

AuditCallback = Callable[[AuditRecord], None]


class PipelineStage(str, Enum):
    """States a run moves through; NOT_FOUND, DONE and FAILED are terminal."""

    RESOLVING = "resolving"
    NOT_FOUND = "not_found"
    FOUND = "found"
    SEGMENTING_EMBEDDED = "segmenting_embedded"
    EXTRACTING_AUDIO = "extracting_audio"
    TRANSCRIBING = "transcribing"
    SUMMARIZING = "summarizing"
    DONE = "done"
    FAILED = "failed"


def _enter(stage: PipelineStage, reference: EpisodeReference) -> None:
    logger.info("[%s] %r @ %ds", stage.value, reference.title, reference.timestamp_seconds)


class InsightPipeline:
    """Sequence the pipeline stages and own the run's temporary resources."""

    def __init__(
        self,
        resolver: EpisodeResolver,
        audio_fetcher: AudioFetcher,
        speech: SpeechToText,
        summarizer: Summarizer,
        audit: AuditCallback | None = None,
        config: PipelineConfig | None = None,
    ) -> None:
        self._resolver = resolver
        self._audio_fetcher = audio_fetcher
        self._speech = speech
        self._summarizer = summarizer
        self._audit = audit
        self._config = config or PipelineConfig()

    def run(self, reference: EpisodeReference) -> InsightResult:
        """Process one captured moment.

        Returns:
            The insight; ``manual_mode`` is set when the episode was not found.

        Raises:
            InsightError: The first stage failure, already tagged with its kind.
        """
        if not reference.title.strip():
            raise InsightValidationError("Title is required")

        outcome = PipelineStage.FAILED
        try:
            result = self._execute(reference)
            outcome = PipelineStage.NOT_FOUND if result.manual_mode else PipelineStage.DONE
            return result
        except InsightError as exc:
            logger.error(
                "Insight pipeline failed (%s): %s | detail: %s", exc.kind, exc.message, exc.detail
            )
            raise
        finally:
            self._emit_audit(reference, outcome)

    def _execute(self, reference: EpisodeReference) -> InsightResult:
        _enter(PipelineStage.RESOLVING, reference)
        match = self._resolver.resolve(reference.title, reference.show_name)

        if match is None:
            _enter(PipelineStage.NOT_FOUND, reference)
            return InsightResult(
                episode_title=reference.title,
                show_name=reference.show_name or UNKNOWN_SHOW,
                timestamp_seconds=reference.timestamp_seconds,
                manual_mode=True,
                message=MANUAL_MODE_MESSAGE,
            )

        _enter(PipelineStage.FOUND, reference)
        logger.info("Found episode: %s", match.canonical_title)

        segment = self._segment_embedded(match, reference)
        if segment is None:
            if not match.audio_url:
                raise NoAudioAvailableError("No audio URL available for this episode")
            segment = self._transcribe_audio(match.audio_url, reference)

        _enter(PipelineStage.SUMMARIZING, reference)
        if not segment.text.strip():
            raise EmptyTranscriptError("Failed to get transcript for this segment")
        logger.info("Transcript (%d chars): %s...", len(segment.text), segment.text[:100])

        summary = self._summarizer.summarize(segment.text, reference.title)

        _enter(PipelineStage.DONE, reference)
        return InsightResult(
            # The caller's reference is authoritative for identity.
            episode_title=reference.title,
            show_name=reference.show_name or match.canonical_show_name or UNKNOWN_SHOW,
            timestamp_seconds=reference.timestamp_seconds,
            thumbnail_url=match.thumbnail_url,
            transcript=segment.text,
            summary=summary,
            transcript_origin=segment.origin,
        )

    def _segment_embedded(
        self, match: EpisodeMatch, reference: EpisodeReference
    ) -> TranscriptSegment | None:
        payload = self._resolver.fetch_transcript(match)
        if payload is None:
            return None

        _enter(PipelineStage.SEGMENTING_EMBEDDED, reference)
        text = segmenter.extract(payload, reference.timestamp_seconds, self._config.window_seconds)
        if not text or not text.strip():
            logger.info("Embedded transcript has nothing at %ds; falling back to audio",
                        reference.timestamp_seconds)
            return None
        return TranscriptSegment(text=text, origin=TranscriptOrigin.EMBEDDED)

    def _transcribe_audio(self, audio_url: str, reference: EpisodeReference) -> TranscriptSegment:
        _enter(PipelineStage.EXTRACTING_AUDIO, reference)
        with self._audio_fetcher.snippet(
            audio_url, reference.timestamp_seconds, self._config.window_seconds
        ) as clip:
            _enter(PipelineStage.TRANSCRIBING, reference)
            text = self._speech.transcribe(clip)
        return TranscriptSegment(text=text, origin=TranscriptOrigin.TRANSCRIBED)

    def _emit_audit(self, reference: EpisodeReference, outcome: PipelineStage) -> None:
        if self._audit is None:
            return
        record = AuditRecord(
            title=reference.title,
            show_name=reference.show_name,
            timestamp_seconds=reference.timestamp_seconds,
            source_url=reference.source_url,
            outcome=outcome.value,
        )
        try:
            self._audit(record)
        except Exception:
            logger.warning("Audit emission failed for %r", reference.title, exc_info=True)


def _speech_service(settings: Settings, provider: SpeechProvider) -> SpeechToTextService:
    if provider is SpeechProvider.ASSEMBLYAI:
        return AssemblyAISpeechService(settings.assemblyai_api_key)
    return WhisperSpeechService(
        api_key=settings.groq_api_key or settings.openai_api_key,
        model=settings.stt_model,
        base_url=settings.stt_base_url or None,
        timeout=settings.transcription_timeout,
    )


def _language_model(settings: Settings, provider: LLMProvider) -> LanguageModelService:
    if provider is LLMProvider.ANTHROPIC:
        return AnthropicLanguageModel(
            api_key=settings.anthropic_api_key,
            model=settings.llm_model,
            timeout=settings.summarization_timeout,
        )
    return OpenAICompatibleLanguageModel(
        api_key=settings.groq_api_key or settings.openai_api_key,
        model=settings.llm_model,
        base_url=settings.llm_base_url or None,
        timeout=settings.summarization_timeout,
    )


def pipeline_config_from_settings(settings: Settings) -> PipelineConfig:
    return PipelineConfig(
        window_seconds=settings.window_seconds,
        fetch_strategy=AudioFetchStrategy(settings.audio_fetch_strategy),
        download_timeout=settings.download_timeout,
        trim_timeout=settings.trim_timeout,
        min_download_bytes=settings.min_download_bytes,
        min_snippet_bytes=settings.min_snippet_bytes,
    )


def build_pipeline(settings: Settings, audit: AuditCallback | None = None) -> InsightPipeline:
    """Wire the concrete services selected in *settings* into a pipeline.

    Only configuration is validated here; SDK and HTTP clients are opened by
    each call, so a run that never reaches a stage never needs its key.

    Raises:
        ValueError: If a provider or fetch strategy name is not recognised.
    """
    speech_provider = SpeechProvider(settings.stt_provider)
    llm_provider = LLMProvider(settings.llm_provider)
    config = pipeline_config_from_settings(settings)
    search = ListenNotesSearch(
        api_key=settings.listennotes_api_key,
        base_url=settings.listennotes_base_url,
        timeout=settings.search_timeout,
    )
    fetcher = AudioFetcher(
        SubprocessExecutor(),
        settings.temp_dir,
        config,
        curl_binary=settings.curl_binary,
        ffmpeg_binary=settings.ffmpeg_binary,
        user_agent=settings.user_agent,
    )
    return InsightPipeline(
        resolver=EpisodeResolver(search),
        audio_fetcher=fetcher,
        speech=SpeechToText(_speech_service(settings, speech_provider)),
        summarizer=Summarizer(_language_model(settings, llm_provider)),
        audit=audit,
        config=config,
    )
