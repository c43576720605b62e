"""HTTP surface for the gradient core (Flask).

Every route is a thin adapter: parse query/JSON input, call the core, return
JSON (or PNG / SVG bytes). Core failures are MeshtoneError subclasses and map
to 400 through a single error handler; anything else is logged and becomes a
500.

Endpoints
---------
GET  /interpolate   colors=ff0000,0000ff&steps=9&space=oklab&easing=linear
GET  /mix           a, b, ratio
POST /mix-many      {"colors": [...], "weights": [...]}
GET  /blend         base, overlay, mode (omit for every mode), opacity
GET  /ramp          base=... | start=...&end=...[&mid=...] | preset=...
GET  /duotone       dark, light | colors=... (every pair)
GET  /harmony       base, kind
POST /mesh/gradient {"points": [...], "params": {...}}
POST /mesh/render   same body plus width/height → image/png
GET  /grain/<type>  amount (0-100), width, height → image/svg+xml
GET  /health
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping, Optional

from flask import Flask, Response, jsonify, request
from werkzeug.exceptions import HTTPException

from .config import Settings, get_settings
from .duotone import generate_duotone, generate_duotone_palette
from .effects import EffectParameters
from .errors import InvalidParameter, MeshtoneError
from .grain import grain_opacity, grain_svg
from .interpolate import interpolate
from .mesh import harmony_colors
from .mixer import blend, blend_previews, mix, mix_many
from .modes import ColorSpace, Easing
from .ramp import find_preset, generate_color_ramp, generate_data_viz_ramp, ramp_from_preset
from .render import render_png_async, render_preview
from .session import MeshSession
from .spaces import canon_hex, hex_to_oklab

log = logging.getLogger(__name__)


# ----------------------------- input parsing ------------------------------


def _number(name: str, default: float) -> float:
    raw = request.args.get(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise InvalidParameter(f"{name} must be a number") from None


def _integer(name: str, default: Optional[int]) -> Optional[int]:
    raw = request.args.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise InvalidParameter(f"{name} must be an integer") from None


def _color_list(raw: Optional[str]) -> list[str]:
    return [canon_hex(c) for c in (raw or "").split(",") if c.strip()]


def _steps(name: str, default: int, settings: Settings) -> int:
    n = _integer(name, default)
    if n > settings.max_steps:
        raise InvalidParameter(f"{name} must be ≤ {settings.max_steps}")
    return n


def _json_body() -> Mapping[str, Any]:
    body = request.get_json(silent=True)
    if not isinstance(body, Mapping):
        raise InvalidParameter("expected a JSON object body")
    return body


def _session_from_body(body: Mapping[str, Any], settings: Settings) -> MeshSession:
    points = body.get("points")
    if not isinstance(points, list):
        raise InvalidParameter("'points' must be a list")
    params = body.get("params") or {}
    if not isinstance(params, Mapping):
        raise InvalidParameter("'params' must be an object")
    session = MeshSession.from_points(points, EffectParameters.from_dict(params))
    session.mirror_tolerance = settings.mirror_tolerance
    return session


# ----------------------------- Flask app ----------------------------------


def create_app(settings: Optional[Settings] = None) -> Flask:
    settings = settings or get_settings()
    app = Flask(__name__)
    app.config["MESHTONE_SETTINGS"] = settings
    logging.basicConfig(level=settings.log_level.upper(), format="%(levelname)s: %(message)s")

    @app.errorhandler(MeshtoneError)
    def core_error(exc: MeshtoneError):
        return jsonify({"error": str(exc)}), 400

    @app.route("/health")
    def health():
        return jsonify({"status": "ok"})

    @app.route("/interpolate")
    def interpolate_route():
        colors = _color_list(request.args.get("colors", "ff0000,0000ff"))
        steps = _steps("steps", 9, settings)
        space = ColorSpace.parse(request.args.get("space") or "oklab")
        easing = Easing.parse(request.args.get("easing") or "linear")
        return jsonify(interpolate(colors, steps, space=space, easing=easing))

    @app.route("/mix")
    def mix_route():
        a = request.args.get("a", "ff0000")
        b = request.args.get("b", "0000ff")
        color = mix(a, b, _number("ratio", 0.5))
        return jsonify({"color": color, "oklab": hex_to_oklab(color).round(4).tolist()})

    @app.route("/mix-many", methods=["POST"])
    def mix_many_route():
        body = _json_body()
        color = mix_many(body.get("colors") or [], body.get("weights"))
        return jsonify({"color": color})

    @app.route("/blend")
    def blend_route():
        base = request.args.get("base", "ffffff")
        overlay = request.args.get("overlay", "000000")
        opacity = _number("opacity", 1.0)
        mode = request.args.get("mode")
        if not mode:
            return jsonify(blend_previews(base, overlay, opacity))
        return jsonify({"color": blend(base, overlay, mode, opacity)})

    @app.route("/ramp")
    def ramp_route():
        steps = _steps("steps", 9, settings)
        preset = request.args.get("preset")
        if preset:
            return jsonify(ramp_from_preset(find_preset(preset), steps))
        if request.args.get("start") and request.args.get("end"):
            return jsonify(
                generate_data_viz_ramp(
                    request.args["start"], request.args["end"], steps, request.args.get("mid") or None
                )
            )
        ramp = generate_color_ramp(
            request.args.get("base", "3b82f6"),
            steps,
            lightness_range=(_number("lmin", 10.0), _number("lmax", 95.0)),
            saturation_shift=_number("saturation_shift", 0.0),
            hue_shift=_number("hue_shift", 0.0),
            space=request.args.get("space") or "oklab",
            schedule=request.args.get("schedule") or "linear",
        )
        return jsonify(ramp)

    @app.route("/duotone")
    def duotone_route():
        colors = request.args.get("colors")
        if colors:
            return jsonify([d.to_dict() for d in generate_duotone_palette(_color_list(colors))])
        duo = generate_duotone(
            request.args.get("dark", "1a1a2e"),
            request.args.get("light", "f9d423"),
            request.args.get("name") or None,
        )
        return jsonify(duo.to_dict())

    @app.route("/harmony")
    def harmony_route():
        base = request.args.get("base", "3b82f6")
        kind = request.args.get("kind") or "analogous"
        return jsonify(harmony_colors(base, kind))

    @app.route("/mesh/gradient", methods=["POST"])
    def mesh_gradient():
        session = _session_from_body(_json_body(), settings)
        descriptor = session.descriptor()
        return jsonify(
            {
                "css": descriptor.to_css(),
                "layers": len(descriptor.layers),
                "style": session.css(),
            }
        )

    @app.route("/mesh/render", methods=["POST"])
    def mesh_render():
        body = _json_body()
        session = _session_from_body(body, settings)
        try:
            width = int(body.get("width", settings.export_width))
            height = int(body.get("height", settings.export_height))
        except (TypeError, ValueError):
            raise InvalidParameter("width and height must be integers") from None
        if width < 1 or height < 1 or width * height > settings.max_render_pixels:
            raise InvalidParameter(
                f"output size must be positive and at most {settings.max_render_pixels} pixels"
            )
        points, params = session.displayed_points, session.params
        if body.get("preview"):
            png = render_preview(points, params, width, height, seed=settings.grain_seed)
        else:
            png = asyncio.run(render_png_async(points, params, width, height, seed=settings.grain_seed))
        return Response(png, mimetype="image/png")

    @app.route("/grain/<grain_type>")
    def grain_route(grain_type: str):
        opacity = grain_opacity(_number("amount", 30.0))
        width = _integer("width", None)
        height = _integer("height", None)
        return Response(grain_svg(grain_type, opacity, width, height), mimetype="image/svg+xml")

    @app.errorhandler(Exception)
    def unexpected_error(exc: Exception):
        if isinstance(exc, HTTPException):
            return exc
        log.exception("Request failed: %s %s", request.method, request.path)
        return jsonify({"error": str(exc)}), 500

    return app


if __name__ == "__main__":
    create_app().run(debug=False, threaded=True)
