from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path
from typing import Callable

from guidectl.bundle import load_bundle
from guidectl.config import BundleConfig, load_config
from guidectl.core.context import RunContext
from guidectl.model import Bundle

BundleFactory = Callable[..., Path]

ROOT = Path(__file__).resolve().parents[3]
SAMPLE_DOCS = ROOT / "packages/guidectl/docs"

GUIDE_A = """# Alpha

Intro text with a link to [beta setup](beta.md#setup).

## Install

Run the installer.

```sh
./install.sh
```

### Verify

Check the version.

## Usage

See [Install](#install) first.
"""

GUIDE_B = """# Beta

## Setup

Configure the thing.

```dart
void main() => runApp(const App());
```

## Install

Beta has its own install chapter.
"""


def run_guidectl(*args: str, cwd: Path | None = None, run_id: str = "pytest-run") -> subprocess.CompletedProcess[str]:
    env = os.environ.copy()
    env["PYTHONPATH"] = str(ROOT / "packages/guidectl/src")
    env["RUN_ID"] = run_id
    env.pop("GUIDECTL_OUT_DIR", None)
    env.pop("GUIDECTL_CONFIG", None)
    return subprocess.run(
        [sys.executable, "-m", "guidectl.cli", *args],
        cwd=(cwd or ROOT),
        env=env,
        text=True,
        capture_output=True,
        check=False,
    )


def context_for(root: Path, **kwargs: object) -> RunContext:
    kwargs.setdefault("quiet", True)
    return RunContext.from_args("test-run", str(root), **kwargs)


def load(root: Path, **kwargs: object) -> tuple[BundleConfig, Bundle]:
    ctx = context_for(root, **kwargs)
    config = load_config(ctx)
    return config, load_bundle(config, ctx)
