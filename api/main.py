from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from analyzer.errors import (
    AnalysisError,
    ConversionError,
    ParseError,
    UpstreamError,
    ValidationError,
)
from analyzer.pronunciation_analyzer import PronunciationAnalyzer, check_language
from configs.settings import get_settings
from generative.client import GenerativeClient
from processors.alignment import calculate_scores
from processors.audio_processor import ffmpeg_available

_DEBUG = get_settings().debug
logging.basicConfig(level=logging.DEBUG if _DEBUG else logging.INFO)
logger = logging.getLogger('pronunciation_api')

app = FastAPI(title='Pronunciation Scoring API', version='1.0.0')

app.add_middleware(
    CORSMiddleware,
    allow_origins=['*'],
    allow_credentials=False,
    allow_methods=['*'],
    allow_headers=['*'],
)


class _ClientHolder:
    _instance: GenerativeClient | None = None

    @classmethod
    def get(cls) -> GenerativeClient:
        if cls._instance is None:
            cls._instance = GenerativeClient()
        return cls._instance


def _analyzer(model: str | None) -> PronunciationAnalyzer:
    return PronunciationAnalyzer(client=_ClientHolder.get(), model=model)


def _domain_http_error(error: Exception) -> HTTPException:
    if isinstance(error, (ParseError, ValidationError, UpstreamError)):
        return HTTPException(status_code=502, detail=f'Model reply error: {error}')
    if isinstance(error, ConversionError):
        return HTTPException(status_code=422, detail=f'Audio conversion failed: {error}')
    return HTTPException(status_code=400, detail=str(error))


def _internal_error(error: Exception):
    logger.exception('Unhandled')
    if _DEBUG:
        return JSONResponse({'error': str(error)}, status_code=500)
    raise HTTPException(status_code=500, detail='Internal server error')


@app.get('/v1/health')
def health() -> dict[str, Any]:
    ffmpeg_ok = ffmpeg_available()
    return {'status': 'ok' if ffmpeg_ok else 'degraded', 'ffmpeg': ffmpeg_ok}


@app.get('/v1/version')
def version() -> dict[str, Any]:
    return {'api': app.version, 'default_model': get_settings().default_model}


class SentenceRequest(BaseModel):
    language: str = ''
    model: str | None = None


@app.post('/v1/sentences/generate')
async def generate_sentence(req: SentenceRequest):
    try:
        analyzer = _analyzer(req.model)
        logger.info(
            'generate sentence language=%s model=%s', req.language, analyzer.model
        )
        sentence, usage = analyzer.generate_sentence(req.language)
        return JSONResponse({**sentence.model_dump(), 'tokenUsage': usage.model_dump()})
    except (AnalysisError, ParseError, ValidationError, UpstreamError) as error:
        logger.exception(type(error).__name__)
        raise _domain_http_error(error)
    except HTTPException:
        raise
    except Exception as error:
        return _internal_error(error)


class ScoreRequest(BaseModel):
    transcription: str
    referenceText: str


@app.post('/v1/pronunciation/score')
async def score_transcription(req: ScoreRequest):
    result = calculate_scores(req.transcription, req.referenceText)
    return JSONResponse(result.to_dict())


@app.post('/v1/pronunciation/analyze')
async def analyze_pronunciation(
    audio: UploadFile = File(..., description='Recorded utterance (webm/wav/ogg)'),
    referenceText: str = Form('', description='Sentence the student was asked to read'),
    language: str = Form('', description='hindi or kannada'),
    model: str | None = Form(None, description='Generative model name'),
):
    req_started = time.time()
    try:
        content = await audio.read()
        logger.info(
            'analyze start name=%s size_kb=%.1f model=%s lang=%s',
            audio.filename,
            len(content) / 1024.0,
            model,
            language,
        )
        if not content:
            raise HTTPException(status_code=400, detail='No audio file provided')
        max_mb = get_settings().max_file_mb
        if len(content) / (1024 * 1024) > max_mb:
            raise HTTPException(
                status_code=413, detail=f'File exceeds the {max_mb:.0f} MB limit'
            )
        if not referenceText.strip() or not language:
            raise HTTPException(status_code=400, detail='Missing referenceText or language')
        check_language(language)
        suffix = Path(audio.filename or 'recording.webm').suffix or '.webm'
        report = _analyzer(model).analyze(content, referenceText, language, suffix=suffix)
        logger.info(
            'analyze done overall=%d total_ms=%.0f',
            report.scoring.overall_score,
            (time.time() - req_started) * 1000.0,
        )
        return JSONResponse(report.to_dict())
    except (
        AnalysisError,
        ConversionError,
        ParseError,
        ValidationError,
        UpstreamError,
    ) as error:
        logger.exception(type(error).__name__)
        raise _domain_http_error(error)
    except HTTPException:
        raise
    except Exception as error:
        return _internal_error(error)
