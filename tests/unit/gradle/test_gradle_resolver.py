"""Tests for turning Gradle model records into a project graph."""

from gimport.host.gradle.resolver import build_project_data


def record(root, path, directory, name, source_sets, root_dir=None, root_name="shop"):
    return {
        "name": name,
        "path": path,
        "dir": str(directory),
        "rootDir": str(root_dir or root),
        "rootName": root_name,
        "sourceSets": source_sets,
    }


def java_sets(directory, deps=()):
    return {
        "main": {
            "sourceDirs": [str(directory / "src/main/java")],
            "resourceDirs": [str(directory / "src/main/resources")],
            "classpath": ["/home/ci/.gradle/caches/guava-31.1-jre.jar"],
            "projectDeps": list(deps),
        },
        "test": {"sourceDirs": [str(directory / "src/test/java")], "projectDeps": list(deps)},
    }


class TestBuildProjectData:
    def test_no_records(self, tmp_path):
        assert build_project_data(tmp_path, []) is None

    def test_multi_project_qualified_names(self, tmp_path):
        records = [
            record(tmp_path, ":", tmp_path, "shop", {}),
            record(tmp_path, ":core", tmp_path / "core", "core", java_sets(tmp_path / "core")),
            record(tmp_path, ":web", tmp_path / "web", "web", java_sets(tmp_path / "web", deps=[":core"])),
        ]

        data = build_project_data(tmp_path, records)
        by_name = {m.name: m for m in data.modules}

        assert data.name == "shop"
        assert [m.name for m in data.modules] == [
            "shop",
            "shop.core",
            "shop.core.main",
            "shop.core.test",
            "shop.web",
            "shop.web.main",
            "shop.web.test",
        ]
        assert by_name["shop.web.main"].dependencies == ["shop.core.main"]
        assert by_name["shop.web.test"].dependencies == ["shop.web.main", "shop.core.main"]
        assert by_name["shop.core.main"].external_classpath == ["/home/ci/.gradle/caches/guava-31.1-jre.jar"]
        assert by_name["shop.core.test"].is_test
        assert by_name["shop.core"].source_set is None

    def test_build_src_is_prefixed(self, tmp_path):
        build_src = tmp_path / "buildSrc"
        records = [
            record(tmp_path, ":", tmp_path, "shop", java_sets(tmp_path)),
            record(build_src, ":", build_src, "buildSrc", java_sets(build_src), root_name="buildSrc"),
        ]

        names = [m.name for m in build_project_data(tmp_path, records).modules]

        assert "shop.buildSrc" in names
        assert "shop.buildSrc.main" in names

    def test_unqualified_names(self, tmp_path):
        records = [record(tmp_path, ":core", tmp_path / "core", "core", java_sets(tmp_path / "core"))]

        names = [m.name for m in build_project_data(tmp_path, records, qualified=False).modules]

        assert names == ["core", "core_main", "core_test"]

    def test_duplicate_records_are_ignored(self, tmp_path):
        rec = record(tmp_path, ":", tmp_path, "shop", java_sets(tmp_path))

        assert [m.name for m in build_project_data(tmp_path, [rec, rec]).modules] == ["shop", "shop.main", "shop.test"]
