"""
Tests for the cybershield-enhance command.
"""
from conftest import encode_png
from cli.enhance import main


class TestEnhanceCli:
    """Test file and folder inputs."""

    def test_folder_input(self, tmp_path, rgba_factory, capsys):
        src = tmp_path / "shots"
        src.mkdir()
        (src / "a.png").write_bytes(encode_png(rgba_factory(30, 20)))
        (src / "b.png").write_bytes(encode_png(rgba_factory(2000, 100)))
        out = tmp_path / "out"

        assert main([str(src), "-o", str(out)]) == 0
        assert sorted(p.name for p in out.iterdir()) == ["a_enhanced.jpg", "b_enhanced.jpg"]
        assert "a_enhanced.jpg" in capsys.readouterr().out

    def test_partial_failure(self, tmp_path, rgba_factory):
        good = tmp_path / "good.png"
        good.write_bytes(encode_png(rgba_factory(10, 10)))
        bad = tmp_path / "bad.png"
        bad.write_bytes(b"nope")
        assert main([str(good), str(bad), "-o", str(tmp_path / "out")]) == 2

    def test_empty_folder(self, tmp_path):
        assert main([str(tmp_path)]) == 1
