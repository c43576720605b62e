import numpy as np
import pytest

from meshtone.errors import InvalidColorFormat, InvalidParameter, UnsupportedMode
from meshtone.mixer import blend, blend_channels, blend_previews, mix, mix_many
from meshtone.modes import BlendMode
from meshtone.spaces import hex_to_oklab, hex_to_rgb255


def within_one(a, b):
    return all(abs(x - y) <= 1 for x, y in zip(hex_to_rgb255(a), hex_to_rgb255(b)))


@pytest.mark.parametrize("color", ["#ff0000", "#3b82f6", "#808080", "#fedcba", "#000000"])
def test_mix_with_itself_is_identity(color):
    for t in (0.0, 0.3, 0.5, 1.0):
        assert within_one(mix(color, color, t), color)


def test_mix_ratio_endpoints():
    assert within_one(mix("#ff0000", "#0000ff", 0.0), "#ff0000")
    assert within_one(mix("#ff0000", "#0000ff", 1.0), "#0000ff")


def test_red_blue_midpoint_is_not_muddy():
    mid = mix("#ff0000", "#0000ff", 0.5)
    assert mid != "#800080"
    L = hex_to_oklab(mid)[0]
    assert hex_to_oklab("#0000ff")[0] < L < hex_to_oklab("#ff0000")[0]


def test_mix_rejects_out_of_range_ratio():
    with pytest.raises(InvalidParameter):
        mix("#ff0000", "#0000ff", 1.5)
    with pytest.raises(InvalidColorFormat):
        mix("#ff0000", "#00f0", 0.5)


def test_mix_many_matches_pairwise_mix():
    assert within_one(mix_many(["#ff0000", "#0000ff"]), mix("#ff0000", "#0000ff", 0.5))


def test_mix_many_is_order_independent():
    a = mix_many(["#ff0000", "#00ff00", "#0000ff"], [1, 2, 3])
    b = mix_many(["#0000ff", "#00ff00", "#ff0000"], [3, 2, 1])
    assert within_one(a, b)


def test_mix_many_normalizes_weights():
    assert within_one(mix_many(["#ff0000", "#0000ff"], [2, 2]), mix_many(["#ff0000", "#0000ff"], [0.5, 0.5]))
    assert within_one(mix_many(["#ff0000", "#0000ff"], [1, 0]), "#ff0000")


def test_mix_many_errors():
    with pytest.raises(InvalidParameter):
        mix_many([])
    with pytest.raises(InvalidParameter):
        mix_many(["#ff0000", "#0000ff"], [0, 0])
    with pytest.raises(InvalidParameter):
        mix_many(["#ff0000", "#0000ff"], [1])
    with pytest.raises(InvalidParameter):
        mix_many(["#ff0000", "#0000ff"], [1, -1])


def test_blend_modes():
    assert blend("#ffffff", "#000000", "multiply") == "#000000"
    assert blend("#808080", "#808080", "screen") == "#c0c0c0"
    assert blend("#ffffff", "#123456", "overlay") == "#ffffff"
    assert blend("#000000", "#ff8800", "soft-light") == "#000000"
    assert blend("#ff0000", "#0000ff", "normal") == "#0000ff"


def test_blend_opacity():
    assert blend("#ff0000", "#0000ff", BlendMode.NORMAL, 0.0) == "#ff0000"
    half = blend("#000000", "#ffffff", "normal", 0.5)
    assert half in ("#7f7f7f", "#808080")
    with pytest.raises(InvalidParameter):
        blend("#000000", "#ffffff", "normal", 2.0)


def test_unknown_blend_mode():
    with pytest.raises(UnsupportedMode):
        blend("#000000", "#ffffff", "dodge")


def test_blend_previews_cover_every_mode():
    previews = blend_previews("#3b82f6", "#f43f5e", 0.8)
    assert set(previews) == {m.value for m in BlendMode}


def test_blend_channels_broadcasts_over_images():
    base = np.ones((4, 5, 3))
    top = np.array([1.0, 0.0, 0.0])
    alpha = np.linspace(0, 1, 5)[None, :, None] * np.ones((4, 1, 1))
    out = blend_channels(base, top, "multiply", alpha)
    assert out.shape == (4, 5, 3)
    assert np.allclose(out[:, 0], 1.0)
    assert np.allclose(out[:, -1], [1.0, 0.0, 0.0])
