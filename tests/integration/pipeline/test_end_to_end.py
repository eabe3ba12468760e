"""End-to-end pipeline tests: discovery on disk, fake toolchain, recorded results"""

import pytest
from sqlmodel import Session

from guidecheck.config import Settings, VersionSettings
from guidecheck.core.pipeline import run_checks
from guidecheck.crud.database import init_db, make_engine
from guidecheck.crud.runs import get_last_run, get_results, record_run


@pytest.fixture(name="site")
def site_fixture(tmp_path):
    """A guide tree with two versions and a non-guide page."""
    for rel in ("_legacy/client/basic.md", "_legacy/server/hello.md", "_stable/client/basic.md"):
        p = tmp_path / rel
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text("```rust\n# fn main() {}\n```\n")
    (tmp_path / "index.md").write_text("# Home\n")
    return tmp_path


@pytest.fixture(name="settings")
def settings_fixture(site):
    return Settings(root=str(site), build_dir=".guidecheck/envs", discovery="walk")


def test_two_runs_bootstrap_once(settings, site, fake_runner):
    """The second run reuses both environments and tests the same files."""
    first = run_checks(settings, runner=fake_runner)
    builds = len(fake_runner.commands("cargo", "build"))
    second = run_checks(settings, runner=fake_runner)
    assert builds == 2
    assert len(fake_runner.commands("cargo", "build")) == 2
    assert [r.path for r in first.results] == [r.path for r in second.results]
    assert (site / ".guidecheck" / "envs" / "legacy" / "Cargo.toml").exists()


def test_single_environment_layout(site, fake_runner):
    """One catch-all version tests every markdown file, like the old single-env script."""
    settings = Settings(
        root=str(site), discovery="walk", edition="2018",
        versions={"tmp": VersionSettings(directory="", dependencies=['hyper = "0.13"'])},
    )
    report = run_checks(settings, runner=fake_runner)
    assert len(report.results) == 4
    assert {c[2] for c in fake_runner.commands("rustdoc")} == {"2018"}


def test_failures_are_individually_recorded(settings, runner_factory, tmp_path):
    """Every failing file is kept in the stored run, not only the first one."""
    runner = runner_factory(codes={"_legacy/server/hello.md": 101, "_stable/client/basic.md": 1})
    report = run_checks(settings, runner=runner)
    engine = make_engine(f"sqlite:///{tmp_path}/results.db")
    init_db(engine)
    with Session(engine) as session:
        record_run(session, report)
        session.commit()
    with Session(engine) as session:
        run = get_last_run(session)
        failed = get_results(session, run, failed_only=True)
    assert run.exit_code == 101
    assert [(r.path, r.code) for r in failed] == [("_legacy/server/hello.md", 101), ("_stable/client/basic.md", 1)]
