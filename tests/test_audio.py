import io
import wave
from pathlib import Path
from unittest.mock import patch

import pytest

from babushka.audio import pcm_to_wav
from babushka.cli._study_logic import study_logic
from babushka.exceptions import AudioError
from babushka.ports import MemoryClipboard, MixerPlayer, WavFileSink


class TestPcmToWav:
    def test_wraps_pcm_with_header(self):
        pcm = b"\x00\x01" * 2400
        wav_bytes = pcm_to_wav(pcm)
        assert wav_bytes.startswith(b"RIFF")
        with wave.open(io.BytesIO(wav_bytes), "rb") as wav:
            assert wav.getframerate() == 24000
            assert wav.getsampwidth() == 2
            assert wav.getnchannels() == 1
            assert wav.getnframes() == 2400

    @pytest.mark.parametrize("pcm", [b"", b"\x00\x01\x02"])
    def test_rejects_empty_or_partial_frames(self, pcm):
        with pytest.raises(AudioError):
            pcm_to_wav(pcm)


class TestWavFileSink:
    def test_play_writes_file(self, tmp_path: Path):
        sink = WavFileSink(tmp_path / "clips")
        wav_bytes = pcm_to_wav(b"\x00\x00" * 10)
        sink.play(wav_bytes)
        assert sink.last_path is not None
        assert sink.last_path.parent == tmp_path / "clips"
        assert sink.last_path.read_bytes() == wav_bytes

    def test_unwritable_directory_raises(self, tmp_path: Path):
        blocker = tmp_path / "file"
        blocker.write_text("x")
        sink = WavFileSink(blocker / "clips")
        with pytest.raises(AudioError):
            sink.play(b"RIFF")
        assert sink.last_path is None


def test_memory_clipboard_keeps_history():
    clipboard = MemoryClipboard()
    assert clipboard.last is None
    clipboard.copy("one")
    clipboard.copy("two")
    assert clipboard.history == ["one", "two"]
    assert clipboard.last == "two"


class FakePygameError(Exception):
    pass


@pytest.fixture
def mock_pygame():
    with patch("babushka.ports.pygame") as pg:
        pg.error = FakePygameError
        pg.mixer.get_init.return_value = None
        pg.mixer.music.get_busy.side_effect = [True, True, False]
        yield pg


class TestMixerPlayer:
    def test_play_initialises_mixer_and_waits(self, mock_pygame):
        player = MixerPlayer(poll_interval=0)
        wav_bytes = pcm_to_wav(b"\x00\x00" * 10)
        player.play(wav_bytes)

        mock_pygame.mixer.init.assert_called_once_with(
            frequency=24000, size=-16, channels=1
        )
        loaded = mock_pygame.mixer.music.load.call_args.args[0]
        assert loaded.read() == wav_bytes
        mock_pygame.mixer.music.play.assert_called_once()
        assert mock_pygame.mixer.music.get_busy.call_count == 3
        mock_pygame.mixer.music.unload.assert_called_once()

    def test_existing_mixer_is_reused(self, mock_pygame):
        mock_pygame.mixer.get_init.return_value = (24000, -16, 1)
        MixerPlayer(poll_interval=0).play(b"RIFF")
        mock_pygame.mixer.init.assert_not_called()

    def test_no_audio_device_raises(self, mock_pygame):
        mock_pygame.mixer.init.side_effect = FakePygameError("No available audio device")
        with pytest.raises(AudioError, match="No available audio device"):
            MixerPlayer().play(b"RIFF")

    def test_trainer_reports_failed_playback(self, trainer, mock_gateway, mock_pygame):
        mock_gateway.synthesize_speech.return_value = b"\x00\x00" * 4
        mock_pygame.mixer.music.load.side_effect = FakePygameError("bad file")
        trainer.audio = MixerPlayer()
        assert trainer.speak("Привет") is False
        assert trainer.is_playing_audio is False


def test_study_flow_plays_through_mixer(tmp_path, settings):
    with patch("babushka.cli._study_logic.start_study_flow") as flow:
        study_logic(tmp_path / "db.duckdb", settings, unit_id="basics")
    trainer = flow.call_args.args[0]
    assert isinstance(trainer.audio, MixerPlayer)
