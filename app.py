from dotenv import load_dotenv

# Pull .env into the environment before the client modules read their settings
load_dotenv()

from fastapi import FastAPI, Request, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, FileResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles
from fastapi.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException
from pydantic import BaseModel
from typing import Optional
import os
import json
import logging
import shutil
from ai_client import GeminiClient, GEMINI_MODEL
from options import split_options, write_options
from selection import OptionNotFound, read_option, select_option
from github_ops import GitHubOps, PublishError, is_valid_screen_name

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("ui-gen")

# Generated options and the current selection live here and are served under /static.
STATIC_DIR = os.environ.get("STATIC_DIR", "static")
# Git working tree of the frontend project that confirmed screens are committed into.
PROJECT_DIR = os.environ.get("PROJECT_DIR", ".")
CLIENT_DIST = os.environ.get("CLIENT_DIST", os.path.join(PROJECT_DIR, "client", "dist"))

logger.info("Current working directory: %s", os.getcwd())
try:
    os.makedirs(STATIC_DIR, exist_ok=True)
    logger.info("Created/verified static directory: %s", STATIC_DIR)
except Exception:
    logger.exception("Failed to create static directory '%s' - cannot proceed", STATIC_DIR)
    raise

app = FastAPI(title="UI Option Generator")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in os.environ.get("CORS_ORIGINS", "*").split(",") if o.strip()],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

if not os.path.isdir(CLIENT_DIST):
    logger.warning("Frontend build folder not found at %s. Run 'npm run build' in client/", CLIENT_DIST)


class GenerateRequest(BaseModel):
    prompt: Optional[str] = None


class SelectRequest(BaseModel):
    file: Optional[str] = None


class ConfirmRequest(BaseModel):
    file: Optional[str] = None
    screenName: Optional[str] = None


@app.exception_handler(StarletteHTTPException)
async def http_error(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"ok": False, "error": exc.detail})


async def parse_payload(req: Request, model):
    body = await req.body()
    try:
        payload = json.loads(body) if body else {}
    except Exception as e:
        logger.warning("Invalid JSON payload: %s", e)
        raise HTTPException(status_code=400, detail="Invalid JSON payload")
    try:
        return model(**payload)
    except Exception as e:
        logger.warning("Payload validation failed: %s", e)
        raise HTTPException(status_code=400, detail="Invalid JSON payload")


@app.post("/generate")
async def generate(req: Request):
    gr = await parse_payload(req, GenerateRequest)
    if not gr.prompt or not gr.prompt.strip():
        raise HTTPException(status_code=400, detail="Prompt required")
    logger.info("Generate request: %.200s", gr.prompt)

    try:
        ai = GeminiClient()
        text = await run_in_threadpool(ai.generate_options, gr.prompt)
    except Exception:
        logger.exception("AI generation failed")
        raise HTTPException(status_code=500, detail="AI generation failed")

    options = split_options(text)
    try:
        files = write_options(options, STATIC_DIR)
    except OSError:
        logger.exception("Writing generated options failed")
        raise HTTPException(status_code=500, detail="AI generation failed")
    logger.info("Generated %d option(s)", len(files))
    return {"files": files}


@app.post("/select")
async def select(req: Request):
    sr = await parse_payload(req, SelectRequest)
    if not sr.file:
        raise HTTPException(status_code=400, detail="File required")
    try:
        code = select_option(STATIC_DIR, sr.file)
    except OptionNotFound:
        raise HTTPException(status_code=404, detail="File not found")
    except OSError:
        logger.exception("Selection failed")
        raise HTTPException(status_code=500, detail="Selection failed")
    return {"code": code}


@app.post("/confirm")
async def confirm(req: Request):
    cr = await parse_payload(req, ConfirmRequest)
    if not cr.file or not cr.screenName:
        raise HTTPException(status_code=400, detail="File and screenName required")
    if not is_valid_screen_name(cr.screenName):
        raise HTTPException(status_code=400, detail="Invalid screenName")
    try:
        code = read_option(STATIC_DIR, cr.file)
    except OptionNotFound:
        raise HTTPException(status_code=404, detail="File not found")

    # Writing the screen is allowed without git for local testing
    push = os.environ.get("SKIP_GITHUB", "").lower() not in ("1", "true", "yes")
    if not push:
        logger.info("SKIP_GITHUB is set; skipping git commit/push")
    gh = GitHubOps(PROJECT_DIR)
    try:
        await run_in_threadpool(gh.publish_screen, cr.screenName, code, push=push)
    except PublishError:
        logger.exception("Git operation failed")
        raise HTTPException(status_code=500, detail="Git push failed")
    except OSError:
        logger.exception("Confirm option failed")
        raise HTTPException(status_code=500, detail="Failed to confirm option")
    return {"success": True, "screenName": cr.screenName}


@app.get("/health")
def health():
    return {"ok": True}


@app.get("/debug")
def debug_info(ping: bool = False):
    """Return runtime diagnostics helpful for debugging key and tool availability.

    This endpoint intentionally does not return secret values. With ?ping=true it
    also makes a one-word call to the model to check the key works.
    """
    info = {
        "cwd": os.getcwd(),
        "static_dir": STATIC_DIR,
        "project_dir": PROJECT_DIR,
        "client_dist_found": os.path.isdir(CLIENT_DIST),
        "model": GEMINI_MODEL,
        "GEMINI_API_KEY_set": bool(os.environ.get("GEMINI_API_KEY")),
        "GITHUB_PAT_set": bool(os.environ.get("GITHUB_PAT")),
        "GITHUB_USERNAME_set": bool(os.environ.get("GITHUB_USERNAME")),
        "GITHUB_REPO_set": bool(os.environ.get("GITHUB_REPO")),
        "git_available": shutil.which("git") is not None,
    }
    if ping:
        try:
            error = GeminiClient().ping()
        except RuntimeError as e:
            error = str(e)
        info["gemini_ok"] = error is None
        if error:
            info["gemini_error"] = error
    return info


@app.get("/{full_path:path}")
def frontend(full_path: str):
    """Serve the built frontend; unknown paths fall back to its index.html."""
    index_path = os.path.join(CLIENT_DIST, "index.html")
    if not os.path.isfile(index_path):
        return PlainTextResponse("Frontend build not found. Run 'npm run build' in client/", status_code=404)
    root = os.path.realpath(CLIENT_DIST)
    candidate = os.path.realpath(os.path.join(root, full_path))
    if full_path and candidate.startswith(root + os.sep) and os.path.isfile(candidate):
        return FileResponse(candidate)
    return FileResponse(index_path)


if __name__ == "__main__":
    import uvicorn

    port = int(os.environ.get("PORT", "5000"))
    logger.info("Server running on http://localhost:%s", port)
    uvicorn.run(app, host="0.0.0.0", port=port)
