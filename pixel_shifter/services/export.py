"""Download helpers for finished pose sprites."""
import io
import re
import zipfile

from pixel_shifter.models.image import PoseDescriptor, PoseResult

_UNSAFE_CHARS = re.compile(r'[\\/:*?"<>|]+')


def sprite_filename(pose: PoseDescriptor) -> str:
    """File name for a pose download: its display label plus `.png`."""
    name = _UNSAFE_CHARS.sub("_", pose.label).strip() or pose.id
    return f"{name}.png"


def build_archive(poses: list[PoseDescriptor], results: dict[str, PoseResult]) -> bytes:
    """Zip every stored pose, in catalog order, as `<label>.png` entries."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for pose in poses:
            result = results.get(pose.id)
            if result is None:
                continue
            archive.writestr(sprite_filename(pose), result.image.data)
    return buffer.getvalue()
