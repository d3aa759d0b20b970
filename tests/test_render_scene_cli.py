"""Tests for the render_scene example script.

Tests cover:
- Argument defaults and overrides
- Backend selection (CPU unless a GPU is requested)
"""

import importlib.util
from pathlib import Path

import pytest

SCRIPT_PATH = Path(__file__).resolve().parent.parent / "examples" / "render_scene.py"


@pytest.fixture
def cli():
    spec = importlib.util.spec_from_file_location("render_scene", SCRIPT_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def init_calls(cli, monkeypatch):
    """Record ti.init calls instead of re-initializing the session runtime."""
    calls = []
    monkeypatch.setattr(cli.ti, "init", lambda **kwargs: calls.append(kwargs["arch"]))
    return calls


class TestArguments:
    """Tests for command-line parsing."""

    def test_defaults(self, cli):
        """Test unset overrides stay None and the GPU is off."""
        args = cli.parse_args([])

        assert args.width is None
        assert args.height is None
        assert args.fov is None
        assert args.max_depth is None
        assert args.scene is None
        assert args.output == "out.ppm"
        assert args.batch_rows == 64
        assert args.gpu is False

    def test_overrides(self, cli):
        """Test explicit values are parsed."""
        args = cli.parse_args(
            ["--width", "320", "--max-depth", "2", "--output", "demo.png", "--gpu", "--quiet"]
        )

        assert args.width == 320
        assert args.max_depth == 2
        assert args.output == "demo.png"
        assert args.gpu is True
        assert args.quiet is True


class TestBackend:
    """Tests for Taichi backend selection."""

    def test_cpu_by_default(self, cli, init_calls):
        """Test the CPU backend is used when no GPU is requested."""
        import taichi as ti

        assert cli.init_backend() == "CPU"
        assert init_calls == [ti.cpu]

    def test_gpu_when_requested(self, cli, init_calls):
        """Test the GPU backend is tried first when requested."""
        import taichi as ti

        assert cli.init_backend(use_gpu=True) == "GPU"
        assert init_calls == [ti.gpu]

    def test_gpu_failure_falls_back_to_cpu(self, cli, monkeypatch):
        """Test a failed GPU initialization falls back to the CPU."""
        import taichi as ti

        calls = []

        def fake_init(**kwargs):
            calls.append(kwargs["arch"])
            if kwargs["arch"] == ti.gpu:
                raise RuntimeError("no GPU")

        monkeypatch.setattr(cli.ti, "init", fake_init)

        assert cli.init_backend(use_gpu=True) == "CPU"
        assert calls == [ti.gpu, ti.cpu]
