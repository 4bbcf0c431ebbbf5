"""DialogFormat FastAPI server — format-code engine for the dialog editor."""

from __future__ import annotations

import logging
import os
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, Field, model_validator

from format_parser import parse_runs, parse_spans, strip_codes, style_at, tokenize
from gradient import FormatError, apply_gradient
from normalizer import normalize
from palette import COLORS, color_code

logger = logging.getLogger(__name__)

app = FastAPI(title="DialogFormat", version="1.0.0")
_security = HTTPBearer(auto_error=False)

TOKEN = os.environ.get("DF_TOKEN", "").strip()
AUTH_DISABLED = os.environ.get("DF_AUTH_DISABLED", "").strip().lower() in ("1", "true", "yes")
MAX_TEXT_LENGTH = int(os.environ.get("DF_MAX_TEXT_LENGTH", "20000"))
HOST = os.environ.get("DF_HOST", "127.0.0.1")
PORT = int(os.environ.get("DF_PORT", "8788"))
LOG_LEVEL = os.environ.get("DF_LOG_LEVEL", "INFO").upper()


def _verify(creds: Optional[HTTPAuthorizationCredentials] = Depends(_security)) -> str:
    if AUTH_DISABLED:
        return ""
    if not TOKEN or creds is None or creds.credentials != TOKEN:
        raise HTTPException(status_code=401, detail="Invalid token")
    return creds.credentials


class TextRequest(BaseModel):
    text: str = Field(max_length=MAX_TEXT_LENGTH)


class GradientRequest(BaseModel):
    text: str = Field(max_length=MAX_TEXT_LENGTH)
    gradient: str = Field(min_length=1, max_length=2000)
    strip_codes: bool = True


class StyleAtRequest(BaseModel):
    text: str = Field(max_length=MAX_TEXT_LENGTH)
    offset: int = Field(ge=0)

    @model_validator(mode="after")
    def offset_in_range(self):
        if self.offset > len(self.text):
            raise ValueError("offset is past the end of text")
        return self


class LangRequest(BaseModel):
    entries: dict[str, str]

    @model_validator(mode="after")
    def values_within_limit(self):
        for key, value in self.entries.items():
            if len(value) > MAX_TEXT_LENGTH:
                raise ValueError(f"Value for {key!r} exceeds {MAX_TEXT_LENGTH} characters")
        return self


@app.get("/health")
async def health():
    return {"status": "ok", "palette": len(COLORS)}


@app.get("/palette")
async def palette(_: str = Depends(_verify)):
    return {
        "colors": [
            {"name": name, "code": color_code(name), "hex": value}
            for name, value in COLORS.items()
        ]
    }


@app.post("/tokenize")
async def post_tokenize(body: TextRequest, _: str = Depends(_verify)):
    return {
        "tokens": [
            {
                "kind": t.kind,
                "value": t.value,
                "start": t.start,
                "end": t.end,
                "category": t.category,
            }
            for t in tokenize(body.text)
        ]
    }


@app.post("/spans")
async def post_spans(body: TextRequest, _: str = Depends(_verify)):
    return {
        "spans": [
            {
                "start": s.start,
                "end": s.end,
                "sourceStart": s.source_start,
                "sourceEnd": s.source_end,
                "run": s.style.to_run(s.text),
            }
            for s in parse_spans(body.text)
        ],
        "lines": parse_runs(body.text),
    }


@app.post("/normalize")
async def post_normalize(body: TextRequest, _: str = Depends(_verify)):
    cleaned = normalize(body.text)
    return {"text": cleaned, "changed": cleaned != body.text}


@app.post("/strip")
async def post_strip(body: TextRequest, _: str = Depends(_verify)):
    return {"text": strip_codes(body.text)}


@app.post("/gradient")
async def post_gradient(body: GradientRequest, _: str = Depends(_verify)):
    text = strip_codes(body.text) if body.strip_codes else body.text
    try:
        annotated = apply_gradient(text, body.gradient)
    except FormatError as exc:
        logger.warning("Gradient not applied: %s", exc)
        raise HTTPException(status_code=400, detail=str(exc))
    return {"text": annotated, "colors": sum(1 for ch in text if not ch.isspace())}


@app.post("/style-at")
async def post_style_at(body: StyleAtRequest, _: str = Depends(_verify)):
    return {"style": style_at(body.text, body.offset).to_run("")}


@app.post("/normalize-lang")
async def post_normalize_lang(body: LangRequest, _: str = Depends(_verify)):
    return {"entries": {key: normalize(value) for key, value in body.entries.items()}}


if __name__ == "__main__":
    import sys

    import uvicorn

    logging.basicConfig(level=LOG_LEVEL)
    if not TOKEN and not AUTH_DISABLED:
        print(
            "\n\033[1;31mFATAL: DF_TOKEN is not set.\033[0m\n"
            "Set it:  export DF_TOKEN=<your-token>\n"
            "Or run without auth:  export DF_AUTH_DISABLED=1\n",
            file=sys.stderr,
        )
        sys.exit(1)
    uvicorn.run(app, host=HOST, port=PORT)
