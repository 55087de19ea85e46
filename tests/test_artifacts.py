"""
Publish build artifacts to Confluence wiki.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/build2conf
"""

import logging
import os
import unittest
from pathlib import Path
from tempfile import TemporaryDirectory

from build2conf.artifacts import (
    DEFAULT_CONTENT_TYPE,
    collect_artifacts,
    find_artifacts,
    guess_content_type,
    list_workspace_files,
    split_file_set,
    validate_file_set,
)
from tests.utility import TypedTestCase, write_file

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(funcName)s [%(lineno)d] - %(message)s",
)


class TestArtifacts(TypedTestCase):
    def setUp(self) -> None:
        self._tmp = TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.workspace = self.root / "workspace"
        self.workspace.mkdir()
        self.artifacts_dir = self.root / "archive"
        self.artifacts_dir.mkdir()

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_find_artifacts(self) -> None:
        expected = [
            write_file(self.artifacts_dir / "a.txt", "a"),
            write_file(self.artifacts_dir / "sub" / "b.log", "b"),
            write_file(self.artifacts_dir / "sub" / "deeper" / "c.bin", "c"),
        ]
        (self.artifacts_dir / "empty").mkdir()

        actual = find_artifacts(self.artifacts_dir)
        self.assertCountEqual(expected, actual)
        for path in actual:
            self.assertTrue(path.is_file())

    def test_find_artifacts_symlink_cycle(self) -> None:
        expected = write_file(self.artifacts_dir / "sub" / "a.txt", "a")
        try:
            os.symlink(self.artifacts_dir, self.artifacts_dir / "sub" / "loop", target_is_directory=True)
        except OSError:
            self.skipTest("symbolic links are not supported")

        self.assertListEqual(find_artifacts(self.artifacts_dir), [expected])

    def test_find_artifacts_missing(self) -> None:
        self.assertListEqual(find_artifacts(self.root / "missing"), [])
        self.assertListEqual(find_artifacts(None), [])
        self.assertListEqual(find_artifacts(self.artifacts_dir), [])

    def test_split_file_set(self) -> None:
        self.assertListEqual(split_file_set("dist/*.whl, reports/**/*.html"), ["dist/*.whl", "reports/**/*.html"])
        self.assertListEqual(split_file_set(" a.txt,,b.txt  c.txt "), ["a.txt", "b.txt", "c.txt"])
        self.assertListEqual(split_file_set(""), [])

    def test_list_workspace_files(self) -> None:
        top = write_file(self.workspace / "top.txt")
        nested = write_file(self.workspace / "docs" / "nested.txt")
        report = write_file(self.workspace / "reports" / "html" / "index.html")
        write_file(self.workspace / "docs" / "readme.md")

        self.assertListEqual(list_workspace_files(self.workspace, "*.txt"), [top])
        self.assertCountEqual(list_workspace_files(self.workspace, "**/*.txt"), [top, nested])
        self.assertListEqual(list_workspace_files(self.workspace, "reports/"), [report])
        self.assertListEqual(list_workspace_files(self.workspace, "reports/**"), [report])

        # a file matched by several patterns is listed once
        self.assertListEqual(list_workspace_files(self.workspace, "*.txt, top.txt"), [top])

        # directories are never returned
        self.assertListEqual(list_workspace_files(self.workspace, "docs"), [])

    def test_validate_file_set(self) -> None:
        write_file(self.workspace / "dist" / "app.whl")

        msg = validate_file_set(self.workspace, "missing/*.txt")
        self.assertIsNotNone(msg)
        assert msg is not None
        self.assertIn("missing", msg)

        self.assertIsNone(validate_file_set(self.workspace, "dist/*.txt"))
        self.assertIsNone(validate_file_set(self.workspace, "*.txt"))

    def test_collect_archived_first(self) -> None:
        archived = write_file(self.artifacts_dir / "a.txt")
        matched = write_file(self.workspace / "b.log")

        files = collect_artifacts(
            artifacts_dir=self.artifacts_dir,
            workspace=self.workspace,
            file_set="*.log",
            attach_archived_artifacts=True,
        )
        self.assertListEqual(files, [archived, matched])

    def test_collect_deduplicates(self) -> None:
        # archived artifacts kept inside the workspace are also matched by the pattern
        artifacts_dir = self.workspace / "dist"
        first = write_file(artifacts_dir / "app-1.0.whl")
        second = write_file(artifacts_dir / "app-1.0.tar.gz")
        extra = write_file(self.workspace / "dist.log")

        with self.assertLogs("build2conf.artifacts", level="INFO") as logs:
            files = collect_artifacts(
                artifacts_dir=artifacts_dir,
                workspace=self.workspace,
                file_set="dist/*, *.log",
                attach_archived_artifacts=True,
            )

        self.assertEqual(len(files), 3)
        self.assertCountEqual(files[:2], [first, second])
        self.assertEqual(files[2], extra)
        self.assertTrue(any("pattern matched an archived artifact" in line for line in logs.output))

    def test_collect_without_archived(self) -> None:
        write_file(self.artifacts_dir / "a.txt")
        matched = write_file(self.workspace / "b.log")

        files = collect_artifacts(
            artifacts_dir=self.artifacts_dir,
            workspace=self.workspace,
            file_set="*.log",
            attach_archived_artifacts=False,
        )
        self.assertListEqual(files, [matched])

    def test_collect_no_match(self) -> None:
        archived = write_file(self.artifacts_dir / "a.txt")

        with self.assertLogs("build2conf.artifacts", level="INFO") as logs:
            files = collect_artifacts(
                artifacts_dir=self.artifacts_dir,
                workspace=self.workspace,
                file_set="target/*.jar",
                attach_archived_artifacts=True,
            )

        self.assertListEqual(files, [archived])
        self.assertTrue(any("No files matched the pattern 'target/*.jar'" in line for line in logs.output))
        self.assertTrue(any("'target' does not exist" in line for line in logs.output))

    def test_collect_invalid_pattern(self) -> None:
        archived = write_file(self.artifacts_dir / "a.txt")
        write_file(self.workspace / "build" / "app.jar")
        absolute = f"{(self.root / 'elsewhere').as_posix()}/*.jar"

        for file_set in ("build/**.jar", absolute):
            with self.subTest(file_set=file_set):
                files = collect_artifacts(
                    artifacts_dir=self.artifacts_dir,
                    workspace=self.workspace,
                    file_set=file_set,
                    attach_archived_artifacts=True,
                )
                self.assertEqual(files[0], archived)

        with self.assertLogs("build2conf.artifacts", level="WARNING"):
            self.assertListEqual(list_workspace_files(self.workspace, f"{absolute}, build/*.jar"), [self.workspace / "build" / "app.jar"])

        msg = validate_file_set(self.workspace, absolute)
        self.assertIsNotNone(msg)
        assert msg is not None
        self.assertIn("not a valid pattern", msg)

    def test_collect_nothing(self) -> None:
        files = collect_artifacts(
            artifacts_dir=None,
            workspace=self.workspace,
            file_set=None,
            attach_archived_artifacts=True,
        )
        self.assertListEqual(files, [])

    def test_content_type(self) -> None:
        self.assertEqual(guess_content_type("a.txt"), "text/plain")
        self.assertEqual(guess_content_type("index.html"), "text/html")
        self.assertEqual(guess_content_type("image.png"), "image/png")
        self.assertEqual(guess_content_type("build.unknown-extension"), DEFAULT_CONTENT_TYPE)
        self.assertEqual(guess_content_type("Makefile"), DEFAULT_CONTENT_TYPE)


if __name__ == "__main__":
    unittest.main()
