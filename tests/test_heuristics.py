"""
Pure unit tests for the local heuristics: app/detection/heuristics.py and
app/detection/text_heuristics.py.
"""

import io

from PIL import Image
from PIL.PngImagePlugin import PngInfo

from app.detection.heuristics import ImageHeuristicsDetector, get_exif_data, load_media, score_image_metadata
from app.detection.text_heuristics import TextHeuristicsDetector, score_text
from app.schemas.verification import MediaInput

CAMERA_EXIF = {"Make": "Canon", "Model": "EOS R5", "GPSLatitude": (51, 30, 0)}


def _signal_names(signals) -> list:
    return [s["signal"] for s in signals]


# ---------------------------------------------------------------------------
# Image metadata scoring
# ---------------------------------------------------------------------------


def test_camera_photo_scores_zero():
    score, signals = score_image_metadata(CAMERA_EXIF, 6000, 4000)
    assert score == 0
    assert signals == []


def test_missing_exif():
    score, signals = score_image_metadata(None, 4032, 3024)
    assert score == 15
    assert _signal_names(signals) == ["missing_exif"]


def test_exif_without_camera_or_gps():
    score, signals = score_image_metadata({"Orientation": 1}, 800, 600)
    assert score == 15
    assert _signal_names(signals) == ["no_camera_info", "no_gps"]


def test_generator_dimensions_and_software():
    score, signals = score_image_metadata({"Software": "Stable Diffusion WebUI"}, 1024, 1024)

    assert _signal_names(signals) == ["no_camera_info", "no_gps", "ai_typical_dimensions", "ai_software_detected"]
    assert score == 85


def test_image_score_is_capped():
    exif = {"Software": "Midjourney v6"}
    score, _ = score_image_metadata(exif, 512, 512)
    assert score <= 100


async def test_image_heuristics_detector():
    result = await ImageHeuristicsDetector().detect(MediaInput(exif=None, width=1792, height=1024))

    assert result.source == "heuristics"
    assert result.score == 35
    assert result.confidence == 0.60
    assert result.metadata["total_signals"] == 2


# ---------------------------------------------------------------------------
# load_media / get_exif_data
# ---------------------------------------------------------------------------


def test_load_media_reads_bytes_and_dimensions(tmp_path):
    buf = io.BytesIO()
    Image.new("RGB", (24, 16)).save(buf, format="PNG")
    path = tmp_path / "pic.png"
    path.write_bytes(buf.getvalue())

    media = load_media(str(path), "https://cdn.example.com/pic.png")

    assert media.content == buf.getvalue()
    assert (media.width, media.height) == (24, 16)
    assert media.mime_type == "image/png"
    assert media.url == "https://cdn.example.com/pic.png"


def test_load_media_reads_camera_exif(tmp_path):
    exif = Image.Exif()
    exif[0x010F] = "Canon"      # Make
    exif[0x0110] = "EOS R5"     # Model
    path = tmp_path / "camera.jpg"
    Image.new("RGB", (8, 8)).save(path, format="JPEG", exif=exif)

    media = load_media(str(path))

    assert media.exif["Make"] == "Canon"
    assert media.exif["Model"] == "EOS R5"


def test_load_media_tolerates_non_images(tmp_path):
    path = tmp_path / "notes.jpg"
    path.write_bytes(b"not an image")

    media = load_media(str(path))

    assert media.content == b"not an image"
    assert media.width is None
    assert media.exif is None


def test_get_exif_data_missing_file_is_empty(tmp_path):
    assert get_exif_data(str(tmp_path / "nope.jpg")) == {}


def test_plain_jpeg_is_reported_as_missing_exif(tmp_path):
    path = tmp_path / "plain.jpg"
    Image.new("RGB", (10, 10)).save(path, format="JPEG")

    assert get_exif_data(str(path)) == {}
    media = load_media(str(path))
    assert media.exif is None

    _, signals = score_image_metadata(media.exif, media.width, media.height)
    assert _signal_names(signals) == ["missing_exif"]


def test_png_text_chunk_is_kept(tmp_path):
    info = PngInfo()
    info.add_text("Software", "ComfyUI")
    path = tmp_path / "gen.png"
    Image.new("RGB", (8, 8)).save(path, format="PNG", pnginfo=info)

    metadata = get_exif_data(str(path))

    assert metadata["Software"] == "ComfyUI"
    _, signals = score_image_metadata(metadata, 8, 8)
    assert "ai_software_detected" in _signal_names(signals)


# ---------------------------------------------------------------------------
# Text scoring
# ---------------------------------------------------------------------------

UNIFORM_AI_TEXT = (
    "It's important to note that this matters. It's important to note that it helps. "
    "It's important to note that we grow. It's important to note that they learn. "
    "It's important to note that you win. It's important to note that all rests. "
    "It's important to note that time flies. It's important to note that people change. "
    "It's important to note that ideas spread. It's important to note that work pays. "
    "In conclusion, we delve into it."
)


def test_score_text_flags_machine_patterns():
    score, signals, sentences = score_text(UNIFORM_AI_TEXT)

    names = _signal_names(signals)
    assert len(sentences) == 11
    assert "repetitive_starters" in names
    assert "perfect_punctuation" in names
    assert "ai_phrases_detected" in names
    assert "uniform_sentence_length" in names
    assert score == 65


def test_score_text_plain_prose():
    score, signals, _ = score_text("We missed the bus. So we walked home in the rain, laughing the whole way!")
    assert score == 0
    assert signals == []


async def test_text_detector_short_text():
    result = await TextHeuristicsDetector().detect(MediaInput(text="Too short."))

    assert result.score == 0
    assert result.confidence == 0.3
    assert result.metadata["note"] == "Text too short for reliable analysis"


async def test_text_detector_scores_long_text():
    result = await TextHeuristicsDetector().detect(MediaInput(text=UNIFORM_AI_TEXT))

    assert result.source == "text_heuristics"
    assert result.score == 65
    assert result.confidence == 0.55
    assert result.metadata["sentence_count"] == 11


async def test_text_detector_without_sentences():
    result = await TextHeuristicsDetector().detect(MediaInput(text="." * 80))
    assert result.metadata["note"] == "No sentences found"


def test_score_text_ignores_whitespace_runs():
    spaced = "We  walked\nhome.   The\tdog   followed us."
    _, _, sentences = score_text(spaced)
    starters = [" ".join(s.split()[:2]).lower() for s in sentences]

    assert starters == ["we walked", "the dog"]
    assert [len(s.split()) for s in sentences] == [3, 4]
