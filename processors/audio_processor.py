from __future__ import annotations

import logging
import shutil
import subprocess
import tempfile
from pathlib import Path

from analyzer.errors import ConversionError

logger = logging.getLogger(__name__)


def ffmpeg_available() -> bool:
    return shutil.which('ffmpeg') is not None


def convert_to_wav(data: bytes, suffix: str = '.webm') -> bytes:
    """Transcode recorded audio to 16 kHz mono PCM WAV with ffmpeg."""
    if not data:
        raise ConversionError('Empty audio input')
    if not ffmpeg_available():
        raise ConversionError('FFmpeg not found in PATH')
    with tempfile.TemporaryDirectory(prefix='audio-convert-') as tmp_dir:
        in_path = Path(tmp_dir) / f'input{suffix or ".webm"}'
        out_path = Path(tmp_dir) / 'output.wav'
        in_path.write_bytes(data)
        cmd = [
            'ffmpeg',
            '-y',
            '-i',
            str(in_path),
            '-acodec',
            'pcm_s16le',
            '-ar',
            '16000',
            '-ac',
            '1',
            str(out_path),
        ]
        logger.debug('ffmpeg cmd: %s', ' '.join(cmd))
        try:
            subprocess.run(
                cmd, check=True, stdout=subprocess.DEVNULL, stderr=subprocess.PIPE
            )
        except subprocess.CalledProcessError as error:
            stderr = (error.stderr or b'').decode('utf-8', 'replace').strip()
            raise ConversionError(
                'Audio conversion failed', {'returncode': error.returncode, 'stderr': stderr[-300:]}
            ) from error
        except OSError as error:
            raise ConversionError(f'Audio conversion failed: {error}') from error
        if not out_path.exists():
            raise ConversionError('WAV conversion failed - output file not created')
        wav = out_path.read_bytes()
    logger.info('converted %d bytes to WAV (%d bytes)', len(data), len(wav))
    return wav
