#!/usr/bin/env python3
"""
Batch processor for thumbnails
Extract every resolution variant of each image in a folder
"""

import argparse
import json
import logging
import os
from datetime import datetime
from pathlib import Path

from tqdm import tqdm

from thumbnail_enhancer import (
    DEFAULT_VARIANTS,
    JpegEncoder,
    ProcessingError,
    VariantPipeline,
    get_profile,
    load_image,
)
from thumbnail_enhancer.config import BORDER_CONFIG, ENHANCEMENT_CONFIG, PROCESSING_CONFIG

IMAGE_EXTENSIONS = ['.png', '.jpg', '.jpeg', '.webp']


def find_images(input_path):
    """List supported images in a directory, sorted by name"""
    images = set()
    for ext in IMAGE_EXTENSIONS:
        images.update(input_path.glob(f'*{ext}'))
        images.update(input_path.glob(f'*{ext.upper()}'))
    return sorted(images)


def process_batch(input_dir, output_dir, profile='pro', mode='exclusive', enhance=True,
                  threshold=None, upscale=True, backend='opencv', save_metrics=True,
                  variants=None):
    """
    Process all images in input_dir

    Args:
        input_dir: Directory containing source images
        output_dir: Directory to save the variants
        profile: Enhancement profile ('pro', 'gentle', 'adaptive')
        mode: 'exclusive' or 'tiered'
        enhance: Enhancement toggle; False writes plain copies
        threshold: Border darkness cutoff
        upscale: Allow enlarging small sources
        backend: Resampling backend ('opencv', 'scikit')
        save_metrics: Save the per-variant manifest to a JSON file
        variants: Variants to extract (default: DEFAULT_VARIANTS)

    Returns:
        dict with totals of processed images and variants
    """
    input_path = Path(input_dir)
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)
    variants = list(variants or DEFAULT_VARIANTS)

    pipeline = VariantPipeline(
        profile=get_profile(profile),
        enhancement_enabled=enhance,
        mode=mode,
        threshold=threshold,
        upscale=upscale,
        backend=backend,
        encoder=JpegEncoder(),
    )

    images = find_images(input_path)
    summary = {'images': len(images), 'variants_ok': 0, 'variants_failed': 0, 'errors': 0}

    if len(images) == 0:
        print(f"No images found in {input_dir}")
        return summary

    print(f"Found {len(images)} images to process")
    print(f"Profile: {profile} ({mode}, enhancement {'on' if enhance else 'off'})")
    print(f"Output directory: {output_dir}")
    print("-" * 60)

    manifest_data = []

    with tqdm(total=len(images) * len(variants), desc="Processing thumbnails") as progress:
        for image_path in images:
            done = progress.n

            def on_progress(fraction, message):
                progress.n = done + round(fraction * len(variants))
                progress.set_postfix_str(message, refresh=False)
                progress.refresh()

            try:
                source = load_image(image_path)
            except ProcessingError as e:
                print(f"\nFailed to load: {image_path.name} ({e})")
                summary['errors'] += 1
                progress.n = done + len(variants)
                progress.refresh()
                continue

            manifest = pipeline.run(source, variants, progress_callback=on_progress)

            for result in manifest:
                if not result.ok:
                    summary['variants_failed'] += 1
                    continue
                output_file = output_path / f"{image_path.stem}_{result.variant.slug}.jpg"
                output_file.write_bytes(result.encoded)
                summary['variants_ok'] += 1

            if save_metrics:
                entry = manifest.to_dict()
                entry['filename'] = image_path.name
                entry['source_width'] = source.width
                entry['source_height'] = source.height
                entry['processed_at'] = datetime.now().isoformat()
                manifest_data.append(entry)

    # Save manifest to JSON
    if save_metrics and len(manifest_data) > 0:
        manifest_file = output_path / 'processing_manifest.json'
        with open(manifest_file, 'w') as f:
            json.dump(manifest_data, f, indent=2)
        print(f"\nManifest saved to: {manifest_file}")

    # Print summary
    print("\n" + "=" * 60)
    print("PROCESSING SUMMARY")
    print("=" * 60)
    print(f"Total images: {summary['images']}")
    print(f"Variants written: {summary['variants_ok']}")
    print(f"Variants failed: {summary['variants_failed']}")
    print(f"Unreadable images: {summary['errors']}")
    print("=" * 60)

    return summary


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Extract enhanced resolution variants of thumbnails',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Extract every variant of the images in 'input'
  python batch_process.py -i input -o output

  # Clarity-preserving profile, Pro tiers only
  python batch_process.py -i input -o output -p gentle --mode tiered

  # Plain copies without enhancement
  python batch_process.py -i input -o output --no-enhance
        """
    )

    parser.add_argument('-i', '--input', required=True, help='Input directory with images')
    parser.add_argument('-o', '--output', required=True, help='Output directory for variants')
    parser.add_argument('-p', '--profile', default=ENHANCEMENT_CONFIG['profile'],
                        choices=['pro', 'gentle', 'adaptive'],
                        help='Enhancement profile (default: %(default)s)')
    parser.add_argument('--mode', default=ENHANCEMENT_CONFIG['mode'],
                        choices=['exclusive', 'tiered'],
                        help='Apply the profile to every variant or to Pro tiers only '
                             '(default: %(default)s)')
    parser.add_argument('--no-enhance', action='store_true',
                        help='Skip border removal and enhancement')
    parser.add_argument('-t', '--threshold', type=int, default=BORDER_CONFIG['threshold'],
                        help='Black bar threshold 0-255 (default: %(default)s)')
    parser.add_argument('--no-upscale', action='store_true',
                        help='Never enlarge sources smaller than the target')
    parser.add_argument('--backend', default=PROCESSING_CONFIG['resample_backend'],
                        choices=['opencv', 'scikit'],
                        help='Resampling backend (default: %(default)s)')
    parser.add_argument('--no-metrics', action='store_true',
                        help='Don\'t save the processing manifest')

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=PROCESSING_CONFIG['log_level'],
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    # Check if input directory exists
    if not os.path.isdir(args.input):
        print(f"Error: Input directory '{args.input}' does not exist")
        return 1

    if not 0 <= args.threshold <= 255:
        print(f"Error: Threshold must be within 0-255, got {args.threshold}")
        return 1

    process_batch(
        input_dir=args.input,
        output_dir=args.output,
        profile=args.profile,
        mode=args.mode,
        enhance=not args.no_enhance,
        threshold=args.threshold,
        upscale=not args.no_upscale,
        backend=args.backend,
        save_metrics=not args.no_metrics,
    )

    return 0


if __name__ == '__main__':
    exit(main())
