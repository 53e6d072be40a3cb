"""
Tests for the batch_process command line tool.
"""

import json

import pytest

from batch_process import find_images, main, process_batch
from thumbnail_enhancer import Tier, VariantSpec, load_image

from conftest import png_bytes


@pytest.fixture
def input_dir(tmp_path, small_frame):
    """Folder with two valid images, one corrupt image and a text file"""
    folder = tmp_path / 'input'
    folder.mkdir()
    (folder / 'first.png').write_bytes(png_bytes(small_frame))
    (folder / 'second.PNG').write_bytes(png_bytes(small_frame))
    (folder / 'broken.jpg').write_bytes(b'definitely not a jpeg')
    (folder / 'notes.txt').write_text('ignored')
    return folder


@pytest.fixture
def variants():
    return [
        VariantSpec('Pro 128', 128, 72, Tier.PRO),
        VariantSpec('Small 32', 32, 18),
    ]


def test_find_images(input_dir):
    names = [path.name for path in find_images(input_dir)]

    assert names == ['broken.jpg', 'first.png', 'second.PNG']


def test_process_batch(input_dir, tmp_path, variants):
    """Every readable image produces one JPEG per variant and a manifest entry."""
    output_dir = tmp_path / 'output'

    summary = process_batch(input_dir, output_dir, profile='pro', variants=variants)

    assert summary == {'images': 3, 'variants_ok': 4, 'variants_failed': 0, 'errors': 1}
    first = load_image(output_dir / 'first_pro_128.jpg')
    assert first.size == (115, 72)
    assert (output_dir / 'second_small_32.jpg').exists()

    manifest = json.loads((output_dir / 'processing_manifest.json').read_text())
    assert [entry['filename'] for entry in manifest] == ['first.png', 'second.PNG']
    assert manifest[0]['source_width'] == 64
    assert manifest[0]['variants'][0]['profile']['name'] == 'pro'


def test_process_batch_without_metrics(input_dir, tmp_path, variants):
    output_dir = tmp_path / 'output'

    process_batch(input_dir, output_dir, variants=variants, save_metrics=False)

    assert not (output_dir / 'processing_manifest.json').exists()


def test_process_batch_empty_folder(tmp_path):
    (tmp_path / 'empty').mkdir()

    summary = process_batch(tmp_path / 'empty', tmp_path / 'output')

    assert summary['images'] == 0


def test_main_missing_input(tmp_path):
    assert main(['-i', str(tmp_path / 'missing'), '-o', str(tmp_path / 'output')]) == 1


def test_main_bad_threshold(input_dir, tmp_path):
    assert main(['-i', str(input_dir), '-o', str(tmp_path / 'output'), '-t', '300']) == 1


def test_main_plain_copies(input_dir, tmp_path):
    """Without enhancement the default variants are written at source size."""
    output_dir = tmp_path / 'output'

    assert main(['-i', str(input_dir), '-o', str(output_dir), '--no-enhance']) == 0

    written = sorted(path.name for path in output_dir.glob('first_*.jpg'))
    assert len(written) == 10
    assert load_image(output_dir / 'first_8k_ultra_pro.jpg').size == (64, 48)
