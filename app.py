"""Flask entrypoint that exposes identify/convert endpoints over the Wand."""

import base64
import io
from typing import Optional

from flask import Flask, jsonify, request

from transmute.errors import CodecNotFoundError, TransmuteError
from transmute.filters import FilterArgs, apply_filters
from transmute.geometry import strategy_by_name
from transmute.options import validate_compression_level
from transmute.registry import default_registry
from transmute.wand import Wand

app = Flask(__name__)

MAX_UPLOAD_BYTES = 8 * 1024 * 1024  # 8MB

MIME_TYPES = {
    "bmp": "image/bmp",
    "gif": "image/gif",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "tiff": "image/tiff",
    "webp": "image/webp",
}


def _form_flag(value: Optional[str]) -> bool:
    return str(value).strip().lower() in {"true", "1", "yes", "on"}


def as_data_url(img_bytes: bytes, mime: str = "image/png") -> str:
    return f"data:{mime};base64,{base64.b64encode(img_bytes).decode()}"


def _read_upload():
    """Return (bytes, None) or (None, error response)."""
    image_file = request.files.get("image")
    if image_file is None:
        return None, (jsonify({"error": "Image file is required"}), 400)

    try:
        image_bytes = image_file.read()
    except Exception as e:
        return None, (jsonify({"error": f"Failed to read image file: {str(e)}"}), 400)

    if not image_bytes:
        return None, (jsonify({"error": "Image file is empty"}), 400)

    if len(image_bytes) > MAX_UPLOAD_BYTES:
        return None, (
            jsonify(
                {"error": f"Image file too large. Maximum size is {MAX_UPLOAD_BYTES // (1024 * 1024)}MB"}
            ),
            400,
        )
    return image_bytes, None


def _load_wand(image_bytes: bytes, strict: bool) -> Wand:
    wand = Wand()
    wand.set_strict(strict)
    wand.decode_image(io.BytesIO(image_bytes))
    return wand


@app.get("/api/formats")
def api_formats():
    formats = [
        {
            "name": entry.name,
            "aliases": list(entry.aliases),
            "decode": entry.can_decode,
            "encode": entry.can_encode,
        }
        for entry in default_registry().codecs()
    ]
    return jsonify({"formats": formats})


@app.post("/api/identify")
def api_identify():
    image_bytes, error = _read_upload()
    if error:
        return error

    strict = _form_flag(request.form.get("strict", "false"))
    try:
        wand = _load_wand(image_bytes, strict)
    except CodecNotFoundError:
        return jsonify({"error": "Unrecognized image format"}), 400
    except TransmuteError as exc:
        return jsonify({"error": f"Invalid image metadata: {str(exc)}"}), 400
    except Exception as exc:
        return jsonify({"error": f"Failed to decode image: {str(exc)}"}), 400

    return jsonify(
        {
            "format": wand.source_format,
            "width": wand.width,
            "height": wand.height,
            "hash": str(wand.compute_hash()),
            "comments": wand.comments,
            "text": [
                {"key": entry.key, "value": entry.value, "language": entry.language}
                for entry in wand.metadata.text
            ],
        }
    )


@app.post("/api/convert")
def api_convert():
    image_bytes, error = _read_upload()
    if error:
        return error

    registry = default_registry()
    output_format = (request.form.get("outputFormat") or "png").strip().lower()
    try:
        output_format = registry.canonical_name(output_format)
    except CodecNotFoundError:
        return jsonify({"error": f"Unsupported output format '{output_format}'"}), 400
    if not registry.entry(output_format).can_encode:
        return jsonify({"error": f"Format '{output_format}' cannot be written"}), 400

    try:
        fa = FilterArgs(
            strip=_form_flag(request.form.get("strip", "false")),
            add_comments=request.form.getlist("comment"),
            crop=request.form.get("crop") or "",
            resize=request.form.get("resize") or "",
            strategy=strategy_by_name(request.form.get("resample") or "bilinear"),
            compression_level=validate_compression_level(int(request.form.get("compress", "-1"))),
        )
        fa.validate()
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400

    strict = _form_flag(request.form.get("strict", "false"))
    try:
        wand = _load_wand(image_bytes, strict)
    except CodecNotFoundError:
        return jsonify({"error": "Unrecognized image format"}), 400
    except TransmuteError as exc:
        return jsonify({"error": f"Invalid image metadata: {str(exc)}"}), 400
    except Exception as exc:
        return jsonify({"error": f"Failed to decode image: {str(exc)}"}), 400

    try:
        apply_filters(wand, fa)
        out = io.BytesIO()
        wand.encode_image(out, output_format)
    except ValueError as exc:
        return jsonify({"error": f"Conversion failed: {str(exc)}"}), 400
    except Exception as exc:
        return jsonify({"error": f"Unexpected error during conversion: {str(exc)}"}), 500

    mime = MIME_TYPES.get(output_format, "application/octet-stream")
    return jsonify(
        {
            "filename": f"converted.{output_format}",
            "width": wand.width,
            "height": wand.height,
            "data_url": as_data_url(out.getvalue(), mime=mime),
        }
    )


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=5000, debug=True)
