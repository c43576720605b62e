import pytest

from meshtone.errors import InvalidColorFormat, InvalidParameter, UnsupportedMode
from meshtone.interpolate import ease, interpolate, interpolate_between_two
from meshtone.modes import ColorSpace, Easing
from meshtone.spaces import hex_to_rgb255


@pytest.mark.parametrize("space", list(ColorSpace))
@pytest.mark.parametrize("easing", list(Easing))
def test_endpoints_are_exact(space, easing):
    out = interpolate(["#ff0000", "#0000ff"], 7, space=space, easing=easing)
    assert len(out) == 7
    assert out[0] == "#ff0000"
    assert out[-1] == "#0000ff"


def test_inner_stops_are_hit_exactly():
    out = interpolate(["#FF0000", "#00ff00", "#0000ff"], 5, space="lab")
    assert out[0] == "#ff0000"
    assert out[2] == "#00ff00"
    assert out[4] == "#0000ff"


def test_black_white_rgb_midpoint():
    out = interpolate(["#000000", "#ffffff"], 3, space="rgb")
    assert out[1] in ("#7f7f7f", "#808080")


def test_two_steps_returns_the_inputs():
    assert interpolate_between_two("#123456", "#abcdef", 2) == ["#123456", "#abcdef"]


def test_hue_takes_the_shorter_arc():
    # red (0deg) to magenta (300deg) passes through 330deg, not through green
    mid = interpolate(["#ff0000", "#ff00ff"], 3, space="hsl")[1]
    r, g, b = hex_to_rgb255(mid)
    assert r == 255
    assert g == 0
    assert b in (127, 128)


def test_achromatic_endpoint_borrows_hue():
    mid = interpolate(["#ffffff", "#ff0000"], 3, space="hsl")[1]
    r, g, b = hex_to_rgb255(mid)
    assert r > g
    assert abs(g - b) <= 1


def test_gray_to_gray_in_polar_space():
    out = interpolate(["#000000", "#ffffff"], 5, space="oklch")
    for h in out:
        r, g, b = hex_to_rgb255(h)
        assert abs(r - g) <= 1 and abs(g - b) <= 1


def test_easing_curves():
    assert ease(0.5, "linear") == 0.5
    assert ease(0.5, "ease-in") == 0.25
    assert ease(0.5, "ease-out") == 0.75
    assert ease(0.5, "ease-in-out") == 0.5
    assert ease(0.25, "ease-in-out") < 0.25
    assert ease(-1.0, "ease-in") == 0.0
    assert ease(2.0, "ease-out") == 1.0


def test_easing_shifts_samples_toward_start():
    lin = interpolate(["#000000", "#ffffff"], 5, space="rgb")
    eased = interpolate(["#000000", "#ffffff"], 5, space="rgb", easing="ease-in")
    assert hex_to_rgb255(eased[1])[0] < hex_to_rgb255(lin[1])[0]


def test_invalid_arguments():
    with pytest.raises(InvalidParameter):
        interpolate(["#ff0000"], 5)
    with pytest.raises(InvalidParameter):
        interpolate(["#ff0000", "#0000ff"], 1)
    with pytest.raises(InvalidColorFormat):
        interpolate(["#ff0000", "blue"], 3)
    with pytest.raises(UnsupportedMode):
        interpolate(["#ff0000", "#0000ff"], 3, space="cmyk")
    with pytest.raises(UnsupportedMode):
        interpolate(["#ff0000", "#0000ff"], 3, easing="bounce")
