"""Shared test fixtures — sample sources, rule sets, temp projects."""

from __future__ import annotations

import logging
import textwrap
from pathlib import Path

import pytest

from safemongo.rules.unsafe_queries import all_rules


@pytest.fixture
def rules():
    """The built-in catalog, in order."""
    return list(all_rules())


@pytest.fixture
def unsafe_js() -> str:
    """An Express route with several unsafe queries."""
    return textwrap.dedent("""\
        const express = require("express");
        const router = express.Router();

        router.get("/users", async (req, res) => {
          const results = await db.users.find({ $where: "this.name === '" + req.query.name + "'" });
          const allUsers = await collection.find({}).toArray();
          await collection.updateOne({ _id: id }, { $set: req.body });
          return res.json(results);
        });
    """)


@pytest.fixture
def safe_js() -> str:
    """Code with no MongoDB calls at all."""
    return textwrap.dedent("""\
        function add(a, b) {
          return a + b;
        }

        module.exports = { add };
    """)


@pytest.fixture
def project(tmp_path: Path, unsafe_js: str, safe_js: str) -> Path:
    """A small project tree with one unsafe and one clean source file."""
    src = tmp_path / "src"
    src.mkdir()
    (src / "routes.js").write_text(unsafe_js)
    (src / "math.ts").write_text(safe_js)
    (src / "README.md").write_text("db.users.find({});\n")
    deps = tmp_path / "node_modules" / "lib"
    deps.mkdir(parents=True)
    (deps / "index.js").write_text("db.users.find({});\n")
    return tmp_path


@pytest.fixture
def clean_project(tmp_path: Path, safe_js: str) -> Path:
    (tmp_path / "math.js").write_text(safe_js)
    return tmp_path


@pytest.fixture(autouse=True)
def _reset_logging():
    """The CLI installs its own handler; undo it so caplog keeps working."""
    yield
    logger = logging.getLogger("safemongo")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
