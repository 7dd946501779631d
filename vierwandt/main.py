# vierwandt/main.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, List, Optional

import pytz
from fastapi import Depends, FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings, configure_logging, load_settings
from .corpus import GROUP_SIZE, Corpus, load_corpus
from .daily import assemble_grid, check_guess, select_puzzle
from .errors import (
    DeliveryFailed, IncompleteGrid, InvalidInput, MailNotConfigured, MissingField, NotAvailable,
)
from .mailer import Mailer, relay
from .schema import (
    CheckIn, CheckOut, ErrorOut, GroupsOut, Health, SubmissionIn, SubmissionOut, WordsOut,
)

logger = logging.getLogger(__name__)

SUBMIT_PATH = "/submit-puzzle"
MISSING_FIELDS_MESSAGE = "Author and category are required."

# ───────── Config ─────────
settings = load_settings()
configure_logging(settings.log_level)

# ───────── App ─────────
app = FastAPI(title="Vierwandt API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

# ───────── Dependencies ─────────
def get_settings() -> Settings:
    return settings

def get_corpus(request: Request) -> Corpus:
    return getattr(request.app.state, "corpus", ())

def get_today() -> datetime:
    return datetime.now(pytz.utc)

def get_mailer() -> Optional[Mailer]:
    # None means: build an SMTP mailer from the mail settings
    return None

# ───────── Error responses ─────────
def _error(status: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status, content=ErrorOut(error=message).model_dump())

@app.exception_handler(NotAvailable)
async def not_available_handler(request: Request, exc: NotAvailable):
    return _error(500, "Could not determine today's puzzle.")

@app.exception_handler(IncompleteGrid)
async def incomplete_grid_handler(request: Request, exc: IncompleteGrid):
    return _error(500, "Could not build today's word grid.")

@app.exception_handler(InvalidInput)
async def invalid_input_handler(request: Request, exc: InvalidInput):
    return _error(400, "Invalid selection. Please send 4 words.")

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # submissions answer in their own {success, message} shape
    if request.url.path == SUBMIT_PATH:
        return _submission_error(400, MISSING_FIELDS_MESSAGE)
    return _error(400, "Invalid request.")

# ───────── Lifecycle ─────────
@app.on_event("startup")
async def on_startup():
    app.state.corpus = load_corpus(settings.puzzles_path)
    if not app.state.corpus:
        logger.error("Starting without puzzles; puzzle endpoints will answer 500")

@app.get("/healthz", response_model=Health)
async def healthz(corpus: Corpus = Depends(get_corpus)):
    return Health(puzzles=len(corpus))

# ───────── Puzzle endpoints ─────────
@app.get("/words", response_model=WordsOut)
async def words(
    corpus: Corpus = Depends(get_corpus),
    today: datetime = Depends(get_today),
    cfg: Settings = Depends(get_settings),
):
    puzzle = select_puzzle(today, cfg.epoch, corpus)
    grid = assemble_grid(puzzle)
    return WordsOut(words=list(grid.words), author=grid.author)

@app.get("/groups", response_model=GroupsOut)
async def groups(
    corpus: Corpus = Depends(get_corpus),
    today: datetime = Depends(get_today),
    cfg: Settings = Depends(get_settings),
):
    puzzle = select_puzzle(today, cfg.epoch, corpus)
    return GroupsOut(groups=list(puzzle.groups))

def _selection(raw: Any) -> List[str]:
    if not isinstance(raw, list) or len(raw) != GROUP_SIZE:
        raise InvalidInput("selectedWords must be an array of 4 words")
    if not all(isinstance(w, str) for w in raw):
        raise InvalidInput("selectedWords must contain strings")
    return raw

@app.post("/check", response_model=CheckOut, response_model_exclude_none=True)
async def check(
    body: CheckIn,
    corpus: Corpus = Depends(get_corpus),
    today: datetime = Depends(get_today),
    cfg: Settings = Depends(get_settings),
):
    selected = _selection(body.selectedWords)
    puzzle = select_puzzle(today, cfg.epoch, corpus)
    result = check_guess(selected, puzzle)
    return CheckOut(correct=result.correct, category=result.category)

# ───────── Submissions ─────────
def _submission_error(status: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status,
        content=SubmissionOut(success=False, message=message).model_dump(),
    )

@app.post(SUBMIT_PATH, response_model=SubmissionOut)
async def submit_puzzle(
    body: SubmissionIn,
    cfg: Settings = Depends(get_settings),
    mailer: Optional[Mailer] = Depends(get_mailer),
):
    logger.info("Puzzle submission received: author=%r category=%r", body.author, body.category)
    try:
        # blocking SMTP call, keep it off the event loop
        await run_in_threadpool(relay, body.author, body.category, body.words, cfg, mailer)
    except MissingField:
        return _submission_error(400, MISSING_FIELDS_MESSAGE)
    except MailNotConfigured as e:
        logger.error("Mail settings incomplete: %s", e)
        return _submission_error(500, "Mail configuration on the server is incomplete.")
    except DeliveryFailed:
        return _submission_error(500, "Error while sending the proposal.")

    return SubmissionOut(success=True, message="Proposal sent successfully!")
