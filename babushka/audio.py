import io
import wave

from .constants import TTS_CHANNELS, TTS_SAMPLE_RATE, TTS_SAMPLE_WIDTH
from .exceptions import AudioError


def pcm_to_wav(
    pcm: bytes,
    sample_rate: int = TTS_SAMPLE_RATE,
    sample_width: int = TTS_SAMPLE_WIDTH,
    channels: int = TTS_CHANNELS,
) -> bytes:
    """Wrap raw PCM frames in a WAV container."""
    frame_size = sample_width * channels
    if not pcm or len(pcm) % frame_size:
        raise AudioError(
            f"PCM data of {len(pcm)} bytes is not a whole number of "
            f"{frame_size}-byte frames."
        )
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wav:
        wav.setnchannels(channels)
        wav.setsampwidth(sample_width)
        wav.setframerate(sample_rate)
        wav.writeframes(pcm)
    return buffer.getvalue()
