import os
import re
import logging
import subprocess
from typing import List, Optional

logger = logging.getLogger('github-ops')

GIT_TIMEOUT = float(os.environ.get('GIT_TIMEOUT', '60'))
SCREEN_NAME_RE = re.compile(r'^[A-Za-z0-9_-][A-Za-z0-9_.-]*$')
SCREENS_SUBDIR = 'client/src'


class PublishError(RuntimeError):
    pass


def _redact(arg: str) -> str:
    # https://<token>@github.com/... -> https://***@github.com/...
    return re.sub(r'(https?://)[^@/\s]+@', r'\1***@', arg)


def _run(cmd: List[str], cwd: Optional[str] = None, timeout: float = GIT_TIMEOUT) -> str:
    logger.info('Run: %s', ' '.join(_redact(c) for c in cmd))
    r = subprocess.run(cmd, cwd=cwd, check=True, capture_output=True, text=True, timeout=timeout)
    if r.stdout:
        logger.info(r.stdout.strip())
    return r.stdout.strip()


def _has_staged_changes(path: str, cwd: Optional[str] = None, timeout: float = GIT_TIMEOUT) -> bool:
    cmd = ['git', 'diff', '--cached', '--quiet', '--', path]
    logger.info('Run: %s', ' '.join(cmd))
    r = subprocess.run(cmd, cwd=cwd, capture_output=True, text=True, timeout=timeout)
    # --quiet exits 1 when there are differences
    if r.returncode not in (0, 1):
        raise subprocess.CalledProcessError(r.returncode, cmd, r.stdout, r.stderr)
    return r.returncode == 1


def is_valid_screen_name(name: str) -> bool:
    return bool(name) and bool(SCREEN_NAME_RE.match(name))


class GitHubOps:
    """Commits published screens into the frontend project and pushes them to GitHub.

    Environment variables expected:
    - GITHUB_PAT, GITHUB_USERNAME, GITHUB_REPO (identify the push remote)
    - GIT_BRANCH (remote branch, default main)

    The project directory must already be a git working tree.
    """

    def __init__(self, project_dir: str = '.', branch: Optional[str] = None):
        self.project_dir = project_dir
        self.branch = branch or os.environ.get('GIT_BRANCH', 'main')
        self.token = os.environ.get('GITHUB_PAT')
        self.username = os.environ.get('GITHUB_USERNAME')
        self.repo = os.environ.get('GITHUB_REPO')
        if not (self.token and self.username and self.repo):
            logger.warning('GITHUB_PAT/GITHUB_USERNAME/GITHUB_REPO not fully set; push will fail')

    @property
    def remote_url(self) -> str:
        if not (self.token and self.username and self.repo):
            raise PublishError('GitHub credentials are not configured')
        return f'https://{self.token}@github.com/{self.username}/{self.repo}.git'

    def screen_dir(self, screen_name: str) -> str:
        return os.path.join(self.project_dir, SCREENS_SUBDIR, screen_name)

    def write_screen(self, screen_name: str, code: str) -> str:
        if not is_valid_screen_name(screen_name):
            raise ValueError(f'invalid screen name: {screen_name!r}')
        target = self.screen_dir(screen_name)
        os.makedirs(target, exist_ok=True)
        path = os.path.join(target, 'index.html')
        with open(path, 'w', encoding='utf-8') as f:
            f.write(code)
        logger.info('Wrote screen %s -> %s', screen_name, path)
        return path

    def commit_and_push(self, screen_name: str) -> None:
        rel = '/'.join([SCREENS_SUBDIR, screen_name])
        # Resolve the remote first so missing credentials fail before touching the index
        url = self.remote_url
        try:
            _run(['git', 'add', rel], cwd=self.project_dir)
            if _has_staged_changes(rel, cwd=self.project_dir):
                _run(['git', 'commit', '-m', f'Add new screen: {screen_name}'], cwd=self.project_dir)
            else:
                # nothing to commit is not an error; the push still runs
                logger.info('No changes to commit for %s', rel)
            _run(['git', 'push', url, f'HEAD:{self.branch}'], cwd=self.project_dir)
        except subprocess.CalledProcessError as e:
            logger.error('Git command failed (exit %s): %s', e.returncode, _redact((e.stderr or '').strip()))
            raise PublishError('git command failed') from e
        except subprocess.TimeoutExpired as e:
            logger.error('Git command timed out after %ss', e.timeout)
            raise PublishError('git command timed out') from e
        except OSError as e:
            logger.error('Could not run git: %s', e)
            raise PublishError('git is not available') from e

    def publish_screen(self, screen_name: str, code: str, push: bool = True) -> str:
        path = self.write_screen(screen_name, code)
        if push:
            self.commit_and_push(screen_name)
        else:
            logger.info('Push disabled; left %s uncommitted', path)
        return path
