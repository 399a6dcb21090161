"""Tests for dependency cache persistence."""

import io

import pytest

from gitdag.exit_codes import DependencyCacheError, CACHE_ERROR
from gitdag.infra.deps_cache import DependencyCache, parse_cache, write_cache
from helpers import sha


class TestWriteCache:
    """Tests for write_cache."""

    def test_layout(self):
        """Opening delimiter, then hash, dependency lines and a closing delimiter per entry."""
        stream = io.StringIO()
        write_cache({"c1": "t1 \nb1 src/a.py\n", "c2": ""}, stream)

        assert stream.getvalue() == ";\nc1\nt1 \nb1 src/a.py\n;\nc2\n;\n"

    def test_unterminated_text_gets_newline(self):
        stream = io.StringIO()
        write_cache({"c1": "b1 a.txt"}, stream)

        assert stream.getvalue() == ";\nc1\nb1 a.txt\n;\n"

    def test_empty_mapping(self):
        stream = io.StringIO()
        write_cache({}, stream)
        assert stream.getvalue() == ";\n"


class TestParseCache:
    """Tests for parse_cache."""

    def test_blocks(self):
        deps = parse_cache(io.StringIO(";\nc1\nb1 a.txt\nb2 b.txt\n;\nc2\n;\n"))

        assert deps == {"c1": "b1 a.txt\nb2 b.txt\n", "c2": ""}

    def test_strips_one_trailing_space(self):
        """The root tree line loses its single trailing space, and only one."""
        deps = parse_cache(io.StringIO(";\nc1\nt1 \nb1 two  \n;\n"))

        assert deps == {"c1": "t1\nb1 two \n"}

    def test_unclosed_block_is_dropped(self):
        deps = parse_cache(io.StringIO(";\nc1\nb1 a\n;\nc2\nb2 b\n"))

        assert deps == {"c1": "b1 a\n"}

    def test_empty_input(self):
        assert parse_cache(io.StringIO("")) == {}

    def test_crlf_line_endings(self):
        deps = parse_cache(io.StringIO(";\r\nc1\r\nb1 a\r\n;\r\n"))
        assert deps == {"c1": "b1 a\n"}


class TestDependencyCache:
    """Tests for DependencyCache file handling."""

    def test_round_trip_preserves_lines(self, tmp_path):
        """Without trailing-space artifacts every dependency line survives."""
        deps = {
            sha("c1"): f"{sha('t1')} src\n{sha('b1')} src/main.py\n",
            sha("c2"): f"{sha('b2')} README.md\n",
            sha("c3"): "",
        }
        cache = DependencyCache(tmp_path / "deps.txt")
        cache.save(deps)

        loaded = cache.load()

        assert set(loaded) == set(deps)
        for commit_hash, text in deps.items():
            assert set(loaded[commit_hash].splitlines()) == set(text.splitlines())

    def test_round_trip_carriage_return_in_path(self, tmp_path):
        """Only newlines end a line, so a carriage return inside a path survives."""
        deps = {sha("c1"): f"{sha('b1')} odd\rname.txt\n{sha('b2')} plain.txt\n"}
        cache = DependencyCache(tmp_path / "deps.txt")
        cache.save(deps)

        assert cache.load() == deps

    def test_round_trip_root_tree(self, tmp_path):
        """A root tree line written as '<hash> ' comes back as '<hash>'."""
        cache = DependencyCache(tmp_path / "deps.txt")
        cache.save({sha("c1"): f"{sha('t0')} \n"})

        assert cache.load() == {sha("c1"): f"{sha('t0')}\n"}

    def test_exists(self, tmp_path):
        cache = DependencyCache(tmp_path / "deps.txt")
        assert not cache.exists()
        cache.save({})
        assert cache.exists()

    def test_save_creates_parent_directories(self, tmp_path):
        cache = DependencyCache(tmp_path / "nested" / "dir" / "deps.txt")
        cache.save({"c1": "b1 a\n"})
        assert (tmp_path / "nested" / "dir" / "deps.txt").is_file()

    def test_save_leaves_no_temp_files(self, tmp_path):
        DependencyCache(tmp_path / "deps.txt").save({"c1": "b1 a\n"})
        assert [p.name for p in tmp_path.iterdir()] == ["deps.txt"]

    def test_load_missing_file_raises(self, tmp_path):
        cache = DependencyCache(tmp_path / "missing.txt")

        with pytest.raises(DependencyCacheError) as exc_info:
            cache.load()
        assert exc_info.value.exit_code == CACHE_ERROR
        assert exc_info.value.path == str(tmp_path / "missing.txt")

    def test_load_undecodable_file_raises(self, tmp_path):
        path = tmp_path / "deps.txt"
        path.write_bytes(b";\n\xff\xfe\xfa\n;\n")

        with pytest.raises(DependencyCacheError):
            DependencyCache(path).load()

    def test_save_to_directory_path_raises(self, tmp_path):
        target = tmp_path / "taken"
        target.mkdir()

        with pytest.raises(DependencyCacheError):
            DependencyCache(target).save({"c1": ""})
