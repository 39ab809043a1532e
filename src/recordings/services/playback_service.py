"""Playback coordination between track selection and the audio player."""

from __future__ import annotations

import logging
from typing import Callable, Optional, Protocol

from recordings.models import FileRecord, PlaybackState
from recordings.services.error_handling import PlaybackError, categorize_error

ProgressCallback = Callable[[float, float], None]


class AudioPlayer(Protocol):
    """One decoded track; released players must not be reused."""

    async def load(self, locator: str, on_progress: ProgressCallback) -> float:
        """Decode the track and return its duration in seconds."""
        ...

    def play(self) -> None:
        ...

    def pause(self) -> None:
        ...

    def seek(self, seconds: float) -> None:
        ...

    def release(self) -> None:
        ...


PlayerFactory = Callable[[], AudioPlayer]


class PlaybackCoordinator:
    """
    Tracks the current recording and bridges UI actions to the player.

    Only one player resource is live at a time: selecting a track releases
    the previous player before the new one starts loading, and a player that
    fails to load is released before the error propagates.
    """

    def __init__(self, player_factory: PlayerFactory, logger_obj: Optional[logging.Logger] = None):
        self.player_factory = player_factory
        self.logger = logger_obj or logging.getLogger(__name__)
        self.state = PlaybackState()
        self._player: Optional[AudioPlayer] = None

    @property
    def has_track(self) -> bool:
        return self._player is not None

    async def select_track(self, record: FileRecord) -> PlaybackState:
        """
        Load ``record`` and start playing it.

        Raises:
            PlaybackError: If the track has no locator or fails to load
        """
        self._release_current()
        self.state.reset(record)

        locator = record.locator
        if not locator:
            self.state.reset()
            raise PlaybackError(f"No playable locator for {record.name}")

        player = self.player_factory()
        self._player = player
        try:
            duration = await player.load(locator, self._progress_handler(player))
        except Exception as e:
            self.logger.warning(f"Failed to load track {record.name}: {e}")
            # A superseded player was already released by the newer selection
            if self._player is player:
                self._release_current()
                self.state.reset()
            raise PlaybackError(f"Failed to load {record.name}: {e}", categorize_error(e)) from e

        if self._player is not player:
            # Another track was selected while this one was decoding
            return self.state

        self.state.duration = float(duration or 0.0)
        player.play()
        self.state.is_playing = True
        self.logger.debug(f"Playing {record.name} ({self.state.duration:.1f}s)")
        return self.state

    def _progress_handler(self, player: AudioPlayer) -> ProgressCallback:
        def on_progress(current_seconds: float, total_seconds: float) -> None:
            if self._player is not player:
                return
            self.state.current_time = float(current_seconds)
            if total_seconds:
                self.state.duration = float(total_seconds)
        return on_progress

    def toggle_play_pause(self) -> bool:
        """Flip play/pause; returns the new playing state."""
        if self._player is None:
            return False
        if self.state.is_playing:
            self._player.pause()
        else:
            self._player.play()
        self.state.is_playing = not self.state.is_playing
        return self.state.is_playing

    def seek(self, seconds: float) -> float:
        if self._player is None:
            return self.state.current_time
        target = max(float(seconds), 0.0)
        if self.state.duration:
            target = min(target, self.state.duration)
        self._player.seek(target)
        self.state.current_time = target
        return target

    def stop(self) -> None:
        """Release the player and clear the current track."""
        self._release_current()
        self.state.reset()

    def _release_current(self) -> None:
        player, self._player = self._player, None
        if player is not None:
            try:
                player.release()
            except Exception as e:
                self.logger.error(f"Error releasing player: {e}", exc_info=True)
