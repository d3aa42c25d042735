"""
Tesseract OCR adapter: screenshot in, RawObservation with block geometry out.
"""

import io
import logging
from typing import Any, Dict, List, Optional, Tuple, Union

try:
    import pytesseract
    PYTESSERACT_AVAILABLE = True
except ImportError:
    PYTESSERACT_AVAILABLE = False
    pytesseract = None

try:
    from PIL import Image
    PIL_AVAILABLE = True
except ImportError:
    PIL_AVAILABLE = False
    Image = None

from expense_parser.schemas import BoundingBox, RawObservation, TextBlock

logger = logging.getLogger(__name__)


def configure_tesseract(tesseract_cmd: Optional[str]) -> None:
    if tesseract_cmd and PYTESSERACT_AVAILABLE:
        pytesseract.pytesseract.tesseract_cmd = tesseract_cmd


def load_image(data: Union[bytes, "Image.Image"]) -> "Image.Image":
    """
    Open raw image bytes with Pillow.

    Raises:
        RuntimeError: Pillow missing
        ValueError: bytes are not a decodable image
    """
    if not PIL_AVAILABLE:
        raise RuntimeError("PIL/Pillow is not installed. Install with: pip install pillow")
    if isinstance(data, Image.Image):
        return data
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
        return img
    except Exception as e:
        raise ValueError(f"Not a valid image: {e}")


def group_words_to_blocks(ocr_dict: Dict[str, Any]) -> List[TextBlock]:
    """
    Convert pytesseract Output.DICT into TextBlocks, one per Tesseract block.
    Lines inside a block keep their order and are newline-joined; the block's
    box is the union of its word boxes.
    """
    words: Dict[int, Dict[Tuple[int, int], List[Tuple[int, str]]]] = {}
    boxes: Dict[int, List[int]] = {}

    n = len(ocr_dict.get("text", []))
    for i in range(n):
        text = str(ocr_dict["text"][i]).strip()
        if not text:
            continue
        block = int(ocr_dict.get("block_num", [0] * n)[i])
        line_key = (int(ocr_dict.get("par_num", [0] * n)[i]), int(ocr_dict.get("line_num", [0] * n)[i]))
        left = int(ocr_dict.get("left", [0] * n)[i])
        top = int(ocr_dict.get("top", [0] * n)[i])
        right = left + int(ocr_dict.get("width", [0] * n)[i])
        bottom = top + int(ocr_dict.get("height", [0] * n)[i])

        words.setdefault(block, {}).setdefault(line_key, []).append((left, text))
        box = boxes.get(block)
        if box is None:
            boxes[block] = [left, top, right, bottom]
        else:
            boxes[block] = [min(box[0], left), min(box[1], top), max(box[2], right), max(box[3], bottom)]

    blocks = []
    for block_num in sorted(words):
        lines = []
        for line_key in sorted(words[block_num]):
            tokens = sorted(words[block_num][line_key], key=lambda t: t[0])
            lines.append(" ".join(t[1] for t in tokens))
        left, top, right, bottom = boxes[block_num]
        blocks.append(TextBlock(
            text="\n".join(lines),
            bounding_box=BoundingBox(left=left, top=top, right=right, bottom=bottom),
        ))
    return blocks


def image_to_observation(image: Union[bytes, "Image.Image"], source: str = "screenshot",
                         lang: str = "eng") -> RawObservation:
    """
    Run Tesseract on a screenshot.

    Raises:
        RuntimeError: pytesseract / Pillow missing
        ValueError: undecodable image
    """
    if not PYTESSERACT_AVAILABLE:
        raise RuntimeError("pytesseract is not installed. Install with: pip install pytesseract")

    img = load_image(image)
    if img.mode not in ("L", "RGB"):
        img = img.convert("RGB")

    ocr_dict = pytesseract.image_to_data(img, lang=lang, output_type=pytesseract.Output.DICT)
    blocks = group_words_to_blocks(ocr_dict)
    text = "\n".join(b.text for b in blocks)

    logger.debug("OCR extracted %d text blocks", len(blocks))
    return RawObservation(text=text, text_blocks=blocks or None, source=source)
