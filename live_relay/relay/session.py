"""Per-connection relay session: the turn state machine between a client and the model.

All inputs (client commands, upstream events, timer firings) go through one
inbox and are handled one at a time by the session task, so no two handlers
ever interleave.
"""

from __future__ import annotations

import asyncio
import logging
import contextlib
from typing import Any

from live_relay.state.phase import TurnPhase
from live_relay.config.audio import PLAYBACK_SAMPLE_RATE_HZ
from live_relay.audio.aggregator import ChunkAggregator
from live_relay.state.settings import UpstreamSettings
from live_relay.audio.fragment import AudioFragment, parse_audio_mime
from live_relay.audio.codec import encode_audio_b64, normalize_client_audio
from live_relay.upstream.events import (
    AudioChunk,
    TurnComplete,
    SetupComplete,
    UpstreamError,
    GenerationInterrupted,
)
from live_relay.errors import (
    FragmentOrderError,
    UpstreamSendError,
    UpstreamNotReadyError,
    TurnAudioOverflowError,
)
from live_relay.config.websocket import (
    WS_ERROR_SESSION,
    WS_EVENT_ERROR,
    WS_EVENT_STATUS,
    WS_ERROR_INTERNAL,
    WS_ERROR_UPSTREAM,
    WS_STATUS_SPEAKING,
    WS_EVENT_NO_RESPONSE,
    WS_EVENT_INTERRUPTED,
    WS_EVENT_USER_MESSAGE,
    WS_EVENT_SESSION_READY,
    WS_EVENT_TURN_COMPLETE,
    WS_NO_RESPONSE_MESSAGE,
    WS_EVENT_AUDIO_RESPONSE,
    WS_TRANSCRIPT_PLACEHOLDER,
)

from .timer import SessionTimer
from .ports import UpstreamClient, ClientTransport, UpstreamClientFactory
from .commands import (
    UserAudio,
    Interrupt,
    CloseSession,
    StartSession,
    SetupTimedOut,
    SessionCommand,
    UpstreamEventReceived,
    ResponseDeadlineElapsed,
)

logger = logging.getLogger(__name__)


class RelaySession:
    def __init__(
        self,
        *,
        session_id: str,
        transport: ClientTransport,
        settings: UpstreamSettings,
        client_factory: UpstreamClientFactory,
        max_turn_audio_bytes: int = 0,
    ) -> None:
        self.session_id = session_id
        self._transport = transport
        self._settings = settings
        self._client_factory = client_factory
        self._phase = TurnPhase.IDLE
        self._inbox: asyncio.Queue[SessionCommand] = asyncio.Queue()
        self._task: asyncio.Task | None = None
        self._client: UpstreamClient | None = None
        self._connect_task: asyncio.Task | None = None
        self._generation = 0
        self._aggregator = ChunkAggregator(max_bytes=max_turn_audio_bytes)
        self._turn_id = 0
        self._turn_sample_rate = 0
        self._pending_transcript: str | None = None
        self._interrupt_pending = False
        self._deadline = SessionTimer(lambda turn_id: self._post(ResponseDeadlineElapsed(turn_id)), name="deadline")
        self._setup_timer = SessionTimer(lambda gen: self._post(SetupTimedOut(gen)), name="setup")
        self._handlers = {
            StartSession: self._on_start,
            UserAudio: self._on_user_audio,
            Interrupt: self._on_interrupt,
            CloseSession: self._on_close,
            UpstreamEventReceived: self._on_upstream_event,
            ResponseDeadlineElapsed: self._on_deadline,
            SetupTimedOut: self._on_setup_timeout,
        }

    @property
    def phase(self) -> TurnPhase:
        return self._phase

    @property
    def is_busy(self) -> bool:
        return self._phase.turn_open

    # Public API: each call only enqueues; the session task does the work.

    def run(self) -> asyncio.Task:
        if self._task is None:
            self._task = asyncio.create_task(self._run_inbox(), name=f"relay-session-{self.session_id}")
        return self._task

    async def start(self) -> None:
        self._post(StartSession())

    async def send_user_audio(self, audio_b64: str, transcript: str | None = None) -> None:
        self._post(UserAudio(audio=audio_b64, transcript=transcript))

    async def interrupt(self) -> None:
        self._post(Interrupt())

    async def close(self) -> None:
        task = self._task
        if task is None or task.done():
            await self._on_close(CloseSession())
            return
        self._post(CloseSession())
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def join(self) -> None:
        """Wait until every queued input has been handled."""
        await self._inbox.join()

    def _post(self, command: SessionCommand) -> None:
        if self._phase is TurnPhase.CLOSED:
            logger.debug("session %s closed; dropping %s", self.session_id, type(command).__name__)
            return
        self._inbox.put_nowait(command)

    async def _run_inbox(self) -> None:
        while True:
            command = await self._inbox.get()
            try:
                await self._handlers[type(command)](command)
            except Exception:
                logger.exception("session %s: failed handling %s", self.session_id, type(command).__name__)
                await self._emit_error("internal error", code=WS_ERROR_INTERNAL)
            finally:
                self._inbox.task_done()
            if self._phase is TurnPhase.CLOSED:
                break
        while not self._inbox.empty():
            self._inbox.get_nowait()
            self._inbox.task_done()

    # Client commands

    async def _on_start(self, _command: StartSession) -> None:
        if self._phase is TurnPhase.ERRORED and self._client is None:
            self._set_phase(TurnPhase.IDLE)
        if self._phase is not TurnPhase.IDLE:
            await self._emit_error("session already started", code=WS_ERROR_SESSION)
            return
        if not self._settings.api_key:
            self._set_phase(TurnPhase.ERRORED)
            await self._emit_error("API key not configured", code=WS_ERROR_SESSION)
            return
        if not self._settings.model_name:
            self._set_phase(TurnPhase.ERRORED)
            await self._emit_error("Model name not configured", code=WS_ERROR_SESSION)
            return

        self._generation += 1
        generation = self._generation
        client = self._client_factory(
            self._settings,
            lambda event: self._post(UpstreamEventReceived(generation=generation, event=event)),
        )
        self._client = client
        self._set_phase(TurnPhase.STARTING)
        self._setup_timer.arm(self._settings.setup_timeout_s, generation)
        self._connect_task = asyncio.create_task(self._open_upstream(client, generation))

    async def _open_upstream(self, client: UpstreamClient, generation: int) -> None:
        try:
            await client.connect()
        except Exception as exc:
            logger.exception("session %s: upstream connect failed", self.session_id)
            self._post(
                UpstreamEventReceived(
                    generation=generation,
                    event=UpstreamError(message=f"Gemini connection error: {exc}"),
                )
            )

    async def _on_user_audio(self, command: UserAudio) -> None:
        if self._phase.turn_open:
            await self._emit_error("response in progress; interrupt first", code=WS_ERROR_SESSION)
            return
        client = self._client
        if self._phase is not TurnPhase.READY or client is None or not client.is_ready:
            await self._emit_error("Gemini connection not ready", code=WS_ERROR_SESSION)
            return

        audio = await asyncio.to_thread(normalize_client_audio, command.audio)
        try:
            await client.send_user_turn(audio)
        except (UpstreamNotReadyError, UpstreamSendError) as exc:
            await self._fail(f"Gemini connection error: {exc}")
            return

        self._turn_id += 1
        self._aggregator.reset()
        self._turn_sample_rate = 0
        transcript = (command.transcript or "").strip()
        self._pending_transcript = transcript or WS_TRANSCRIPT_PLACEHOLDER
        self._set_phase(TurnPhase.USER_TURN_PENDING)
        self._deadline.arm(self._settings.response_deadline_s, self._turn_id)

    async def _on_interrupt(self, _command: Interrupt) -> None:
        if not self._phase.turn_open:
            logger.debug("session %s: interrupt ignored in phase %s", self.session_id, self._phase.value)
            return
        client = self._client
        try:
            if client is None:
                raise UpstreamNotReadyError(state="missing")
            await client.send_interrupt()
        except (UpstreamNotReadyError, UpstreamSendError) as exc:
            await self._fail(f"Gemini connection error: {exc}")
            return
        self._interrupt_pending = True
        self._discard_turn()
        self._set_phase(TurnPhase.READY)
        await self._emit(WS_EVENT_INTERRUPTED, {})

    async def _on_close(self, _command: CloseSession) -> None:
        if self._phase is TurnPhase.CLOSED:
            return
        self._setup_timer.cancel()
        self._discard_turn()
        await self._release_client()
        self._set_phase(TurnPhase.CLOSED)
        logger.info("session %s closed", self.session_id)

    # Upstream events

    async def _on_upstream_event(self, command: UpstreamEventReceived) -> None:
        if command.generation != self._generation or self._client is None:
            logger.debug("session %s: stale upstream event %s dropped", self.session_id, type(command.event).__name__)
            return
        event = command.event
        if isinstance(event, SetupComplete):
            await self._on_setup_complete()
        elif isinstance(event, AudioChunk):
            await self._on_audio_chunk(event)
        elif isinstance(event, TurnComplete):
            await self._on_turn_complete(event)
        elif isinstance(event, GenerationInterrupted):
            await self._on_generation_interrupted()
        elif isinstance(event, UpstreamError):
            await self._fail(event.message, close_code=event.close_code)

    async def _on_setup_complete(self) -> None:
        if self._phase is not TurnPhase.STARTING:
            logger.debug("session %s: setup ack in phase %s ignored", self.session_id, self._phase.value)
            return
        self._setup_timer.cancel()
        self._set_phase(TurnPhase.READY)
        await self._emit(WS_EVENT_SESSION_READY, {})

    async def _on_audio_chunk(self, event: AudioChunk) -> None:
        if not self._phase.turn_open:
            logger.debug(
                "session %s: audio fragment (%d bytes) outside a turn dropped", self.session_id, len(event.data)
            )
            return
        encoding = parse_audio_mime(event.mime_type)
        sequence = self._aggregator.next_sequence if event.sequence is None else event.sequence
        try:
            self._aggregator.append(AudioFragment(data=event.data, encoding=encoding, sequence=sequence))
        except TurnAudioOverflowError as exc:
            logger.warning("session %s: %s; abandoning turn", self.session_id, exc)
            await self._on_interrupt(Interrupt())
            await self._emit_error("response audio exceeded maximum duration", code=WS_ERROR_SESSION)
            return
        except FragmentOrderError as exc:
            logger.warning("session %s: %s; abandoning turn", self.session_id, exc)
            await self._on_interrupt(Interrupt())
            await self._emit_error(f"response audio incomplete: {exc}", code=WS_ERROR_UPSTREAM)
            return

        if self._phase is TurnPhase.USER_TURN_PENDING:
            self._deadline.cancel()
            self._turn_sample_rate = encoding.sample_rate
            await self._flush_transcript()
            self._set_phase(TurnPhase.MODEL_TURN_STREAMING)
            await self._emit(WS_EVENT_STATUS, {"state": WS_STATUS_SPEAKING})

    async def _on_turn_complete(self, event: TurnComplete) -> None:
        interrupt_pending, self._interrupt_pending = self._interrupt_pending, False
        if not self._phase.turn_open:
            logger.debug("session %s: turn complete in phase %s ignored", self.session_id, self._phase.value)
            return
        if interrupt_pending and self._phase is TurnPhase.USER_TURN_PENDING and not len(self._aggregator):
            # Completion of the answer that was cancelled, not of the turn now open.
            logger.info("session %s: trailing completion of interrupted answer ignored", self.session_id)
            return
        expected, received = event.fragment_count, len(self._aggregator)
        if expected is not None and expected != received:
            logger.warning(
                "session %s: turn %d ended with %d of %d audio parts",
                self.session_id,
                self._turn_id,
                received,
                expected,
            )
            self._discard_turn()
            self._set_phase(TurnPhase.READY)
            await self._emit(WS_EVENT_INTERRUPTED, {})
            await self._emit_error(
                f"response audio incomplete: received {received} of {expected} parts", code=WS_ERROR_UPSTREAM
            )
            return
        self._deadline.cancel()
        await self._flush_transcript()

        fragments = self._aggregator.pending_fragments()
        audio = self._aggregator.drain_on_complete()
        for fragment in fragments:
            await self._emit(WS_EVENT_AUDIO_RESPONSE, {"audio": encode_audio_b64(fragment.data)})
        await self._emit(
            WS_EVENT_TURN_COMPLETE,
            {
                "audio": encode_audio_b64(audio),
                "sample_rate": self._turn_sample_rate or PLAYBACK_SAMPLE_RATE_HZ,
                "fragments": len(fragments),
                "bytes": len(audio),
            },
        )
        logger.info(
            "session %s: turn %d complete fragments=%d bytes=%d",
            self.session_id,
            self._turn_id,
            len(fragments),
            len(audio),
        )
        self._set_phase(TurnPhase.READY)

    async def _on_generation_interrupted(self) -> None:
        if self._interrupt_pending:
            self._interrupt_pending = False
            if self._phase.turn_open and len(self._aggregator):
                logger.info(
                    "session %s: %d fragments of the cancelled answer discarded", self.session_id, len(self._aggregator)
                )
                self._aggregator.reset()
            return
        if not self._phase.turn_open:
            return
        logger.info("session %s: upstream cancelled turn %d", self.session_id, self._turn_id)
        self._discard_turn()
        self._set_phase(TurnPhase.READY)
        await self._emit(WS_EVENT_INTERRUPTED, {})

    # Timers

    async def _on_deadline(self, command: ResponseDeadlineElapsed) -> None:
        if self._phase is not TurnPhase.USER_TURN_PENDING or command.turn_id != self._turn_id:
            return
        logger.info("session %s: no response to turn %d yet", self.session_id, self._turn_id)
        await self._emit(WS_EVENT_NO_RESPONSE, {"message": WS_NO_RESPONSE_MESSAGE})

    async def _on_setup_timeout(self, command: SetupTimedOut) -> None:
        if self._phase is not TurnPhase.STARTING or command.generation != self._generation:
            return
        await self._fail("Gemini setup timed out")

    # Helpers

    async def _fail(self, message: str, *, close_code: int | None = None) -> None:
        if self._phase in (TurnPhase.ERRORED, TurnPhase.CLOSED):
            logger.debug("session %s: further upstream failure ignored: %s", self.session_id, message)
            return
        logger.warning("session %s: upstream failure: %s", self.session_id, message)
        self._setup_timer.cancel()
        self._discard_turn()
        self._set_phase(TurnPhase.ERRORED)
        payload: dict[str, Any] = {"message": message, "code": WS_ERROR_UPSTREAM}
        if close_code is not None:
            payload["close_code"] = close_code
        await self._emit(WS_EVENT_ERROR, payload)
        await self._release_client()

    async def _release_client(self) -> None:
        client, self._client = self._client, None
        self._generation += 1
        self._interrupt_pending = False
        connect_task, self._connect_task = self._connect_task, None
        if connect_task is not None and not connect_task.done():
            connect_task.cancel()
            with contextlib.suppress(asyncio.CancelledError, Exception):
                await connect_task
        if client is not None:
            with contextlib.suppress(Exception):
                await client.close()

    def _discard_turn(self) -> None:
        self._deadline.cancel()
        self._aggregator.reset()
        self._pending_transcript = None

    async def _flush_transcript(self) -> None:
        text, self._pending_transcript = self._pending_transcript, None
        if text is not None:
            await self._emit(WS_EVENT_USER_MESSAGE, {"text": text})

    def _set_phase(self, phase: TurnPhase) -> None:
        if phase is not self._phase:
            logger.debug("session %s: %s -> %s", self.session_id, self._phase.value, phase.value)
        self._phase = phase

    async def _emit(self, msg_type: str, payload: dict[str, Any]) -> None:
        if not await self._transport.send_event(msg_type, payload):
            logger.debug("session %s: client gone; %s not delivered", self.session_id, msg_type)

    async def _emit_error(self, message: str, *, code: str) -> None:
        await self._emit(WS_EVENT_ERROR, {"message": message, "code": code})


__all__ = ["RelaySession"]
