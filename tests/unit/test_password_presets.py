from statement_ledger.decryption.presets import PasswordPresets


class TestPasswordPresets:
    def test_keeps_order(self) -> None:
        presets = PasswordPresets(["b", "a"])
        assert list(presets) == ["b", "a"]

    def test_ignores_blank_and_duplicate(self) -> None:
        presets = PasswordPresets()
        assert presets.add(" x ") is True
        assert presets.add("x") is False
        assert presets.add("   ") is False
        assert list(presets) == ["x"]

    def test_remove(self) -> None:
        presets = PasswordPresets(["a", "b"])
        presets.remove("a")
        presets.remove("missing")
        assert list(presets) == ["b"]
        assert "a" not in presets
        assert len(presets) == 1
