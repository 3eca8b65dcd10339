"""
Batch Session Examples

Demonstrates a typical editing session: load a batch, run a few tools,
step back through history and save the exports to disk.
"""

import io
import sys
import tempfile
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from PIL import Image

from PB_Libs.SessionLib import ImageSession
from PB_Libs.ToolsLib import ColorTransformConfig, FormatConvertConfig, MergeConfig, ResizeConfig, WatermarkConfig


def _encoded(color, size):
    output = io.BytesIO()
    Image.new("RGBA", size, color).save(output, format="PNG")
    return output.getvalue()


def example_tool_chain(session):
    """Example: Chaining tools over the working set."""
    print("=" * 60)
    print("Example 1: Tool Chain")
    print("=" * 60)

    for config in (
        ResizeConfig(mode="percentage", percentage=50),
        ColorTransformConfig(transform_type="sepia"),
        WatermarkConfig(text="Pixel Batch", font_size=24, position="bottom-right", opacity=0.7),
    ):
        result = session.apply(config)
        sizes = ", ".join(f"{w}x{h}" for w, h in (image.dimensions for image in result.images))
        print(f"✓ {config.DESCRIPTION}: {sizes}")

    print(f"\nHistory: {[entry.operation for entry in session.entries]}")
    print(f"Stats: {session.stats().describe()}")
    print()


def example_merge_and_revert(session):
    """Example: Merging, then reverting to an earlier entry."""
    print("=" * 60)
    print("Example 2: Merge and Revert")
    print("=" * 60)

    session.apply(MergeConfig(direction="horizontal", spacing=10, selected_indexes=[0, 1]))
    merged = session.working_set[-1]
    print(f"✓ Merged image {merged.name}: {merged.dimensions[0]}x{merged.dimensions[1]}")

    first = session.entries[0]
    session.revert_to(first.entry_id)
    print(f"✓ Reverted to '{first.description}', {len(session.history)} entry left")
    print()


def example_export(session, output_dir):
    """Example: Exporting the batch and a single history entry."""
    print("=" * 60)
    print("Example 3: Export")
    print("=" * 60)

    session.apply(FormatConvertConfig(target_format="jpeg", quality=0.8))
    path = session.save_export(output_dir)
    print(f"✓ Saved {path.name} ({path.stat().st_size} bytes)")

    try:
        session.save_export(output_dir)
        print("❌ FAILED: Existing export was overwritten!")
    except ValueError as e:
        print("✓ Existing export kept:")
        print(f"  Error: {e}")

    session.reset_to_original()
    print(f"✓ Reset to {len(session.working_set)} original image(s)")
    print()


def main():
    session = ImageSession()
    rejected = session.load_images([
        ("sunset.png", _encoded((250, 120, 40, 255), (400, 200)), "image/png"),
        ("forest.png", _encoded((30, 140, 60, 255), (300, 300)), "image/png"),
        ("notes.txt", b"not an image", "text/plain"),
    ])
    for item in rejected:
        print(f"Skipped {item.name}: {item.reason}")
    print()

    example_tool_chain(session)
    example_merge_and_revert(session)
    with tempfile.TemporaryDirectory() as temp_dir:
        example_export(session, Path(temp_dir))


if __name__ == "__main__":
    main()
