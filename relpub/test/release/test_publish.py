from __future__ import annotations

import json
import sys
from dataclasses import replace
from pathlib import Path

from relpub.core.config import PublishConfig
from relpub.core.result import Err, Ok
from relpub.release.publish import ALLOW_DIRTY_FLAG, CommandPublisher, build_publish_command

TOKEN = "cio-token-123"

# Stand-in for `cargo publish`: records what it saw, then exits with
# the code given in FAKE_EXIT.
_FAKE_TOOL = """
import json, os, pathlib, sys
pathlib.Path("observed.json").write_text(json.dumps({
    "argv": sys.argv[1:],
    "token": os.environ.get("CARGO_REGISTRY_TOKEN"),
    "protocol": os.environ.get("CARGO_REGISTRIES_CRATES_IO_PROTOCOL"),
    "manifest": pathlib.Path("Cargo.toml").read_text(),
}))
code = int(os.environ.get("FAKE_EXIT", "0"))
if code:
    sys.stderr.write("error: failed to publish with token " + os.environ.get("CARGO_REGISTRY_TOKEN", "") + "\\n")
else:
    print("Uploaded demo")
sys.exit(code)
"""


def _fake_settings(**overrides: object) -> PublishConfig:
    return replace(PublishConfig(command=(sys.executable, "-c", _FAKE_TOOL)), **overrides)


class TestBuildPublishCommand:
    def test_default_is_cargo_publish_allow_dirty(self) -> None:
        command = build_publish_command(PublishConfig(), TOKEN)

        assert command.argv == ("cargo", "publish", "--allow-dirty")
        assert command.env == {
            "CARGO_REGISTRIES_CRATES_IO_PROTOCOL": "sparse",
            "CARGO_REGISTRY_TOKEN": TOKEN,
        }

    def test_token_on_argv(self) -> None:
        command = build_publish_command(PublishConfig(token_flag="--token"), TOKEN)

        assert command.argv == ("cargo", "publish", "--allow-dirty", "--token", TOKEN)
        assert "CARGO_REGISTRY_TOKEN" not in command.env
        assert TOKEN not in command.render((TOKEN,))
        assert command.render((TOKEN,)).endswith("--token ***")

    def test_extra_args_after_allow_dirty(self) -> None:
        command = build_publish_command(PublishConfig(args=("--no-verify",)), TOKEN)
        assert command.argv == ("cargo", "publish", ALLOW_DIRTY_FLAG, "--no-verify")

    def test_allow_dirty_off(self) -> None:
        command = build_publish_command(PublishConfig(allow_dirty=False), TOKEN)
        assert ALLOW_DIRTY_FLAG not in command.argv

    def test_allow_dirty_not_duplicated(self) -> None:
        settings = PublishConfig(command=("cargo", "publish", "--allow-dirty"))
        command = build_publish_command(settings, TOKEN)
        assert command.argv.count(ALLOW_DIRTY_FLAG) == 1


class TestCommandPublisher:
    def test_publish_sees_tree_token_and_protocol(self, tmp_path: Path) -> None:
        (tmp_path / "Cargo.toml").write_text('version = "1.2.3"\nname = "demo"\n')
        publisher = CommandPublisher(_fake_settings(), environ={"PATH": ""})

        result = publisher.publish(tmp_path, TOKEN)

        assert isinstance(result, Ok)
        assert "Uploaded demo" in result.value
        observed = json.loads((tmp_path / "observed.json").read_text())
        assert observed["argv"] == [ALLOW_DIRTY_FLAG]
        assert observed["token"] == TOKEN
        assert observed["protocol"] == "sparse"
        assert observed["manifest"] == 'version = "1.2.3"\nname = "demo"\n'

    def test_failure_carries_status_and_masked_output(self, tmp_path: Path) -> None:
        (tmp_path / "Cargo.toml").write_text('version = "1.2.3"\n')
        publisher = CommandPublisher(_fake_settings(env={"FAKE_EXIT": "1"}), environ={})

        result = publisher.publish(tmp_path, TOKEN)

        assert isinstance(result, Err)
        assert result.error.returncode == 1
        assert "failed to publish" in result.error.stderr
        assert TOKEN not in result.error.stderr
        assert TOKEN not in result.error.message
        assert "(exit 1)" in result.error.message

    def test_missing_tool(self, tmp_path: Path) -> None:
        publisher = CommandPublisher(
            PublishConfig(command=("definitely-not-cargo-12345", "publish")), environ={}
        )

        result = publisher.publish(tmp_path, TOKEN)

        assert isinstance(result, Err)
        assert result.error.returncode == -1
        assert result.error.hint is not None
        assert "definitely-not-cargo-12345" in result.error.hint

    def test_describe_masks_token(self) -> None:
        publisher = CommandPublisher(PublishConfig(token_flag="--token"), environ={})

        described = publisher.describe(Path("."), TOKEN)

        assert described.startswith("cargo publish --allow-dirty --token")
        assert TOKEN not in described
