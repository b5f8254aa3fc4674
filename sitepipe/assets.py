"""
Asset tasks: styles, scripts, images, fonts and uploads.

Everything is mirrored from its source root into the target root. In
production builds styles go through csscompressor and scripts through
rjsmin; images, fonts and uploads are copied unchanged.
"""

import logging
import os
import shutil

from .markup import minify_css, minify_js
from .pipeline import BuildResult

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = ('.png', '.jpg', '.gif', '.svg', '.webp')
FONT_EXTENSIONS = ('.ttf', '.otf', '.eot', '.woff', '.woff2')


def find_files(root, extensions=None, exclude=None, recursive=True):
    """Sorted files under root, optionally filtered by extension and an excluded subtree."""
    if not os.path.isdir(root):
        return []
    exclude = os.path.abspath(exclude) if exclude else None
    found = []
    for dirpath, dirs, names in os.walk(root):
        dirs.sort()
        current = os.path.abspath(dirpath)
        if exclude and (current == exclude or current.startswith(exclude + os.sep)):
            continue
        for name in sorted(names):
            if extensions is None or name.lower().endswith(extensions):
                found.append(os.path.join(dirpath, name))
        if not recursive:
            break
    return found


def _target_path(path, source_root, target_root):
    target = os.path.join(target_root, os.path.relpath(path, source_root))
    os.makedirs(os.path.dirname(target), exist_ok=True)
    return target


def copy_files(files, source_root, target_root):
    """Copy files preserving their path relative to source_root."""
    result = BuildResult()
    for path in files:
        try:
            target = _target_path(path, source_root, target_root)
            shutil.copy2(path, target)
            result.copied.append(target)
        except (IOError, OSError, PermissionError) as e:
            logger.error(f"Failed to copy {path}: {e}")
            result.failed[path] = str(e)
    return result


def _transform_files(files, source_root, target_root, transform, kind):
    result = BuildResult()
    for path in files:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                text = f.read()
            target = _target_path(path, source_root, target_root)
            with open(target, 'w', encoding='utf-8') as f:
                f.write(transform(text))
            result.written.append(target)
            logger.debug(f"Minified {kind}: {path}")
        except (IOError, OSError, PermissionError) as e:
            logger.error(f"Failed to minify {kind} file {path}: {e}")
            result.failed[path] = str(e)
        except Exception as e:
            logger.error(f"Unexpected error minifying {kind} file {path}: {e}")
            result.failed[path] = str(e)
    return result


def build_styles(assets_dir, target_dir, minify=False):
    files = find_files(assets_dir, ('.css',))
    if not minify:
        return copy_files(files, assets_dir, target_dir)

    plain = [f for f in files if f.endswith('.min.css')]
    result = copy_files(plain, assets_dir, target_dir)
    minified = _transform_files([f for f in files if f not in plain], assets_dir, target_dir, minify_css, 'CSS')
    result.written.extend(minified.written)
    result.failed.update(minified.failed)
    return result


def build_scripts(assets_dir, target_dir, bundles=None, debug=True, minify=False):
    """
    Build script bundles.

    ``bundles`` maps an output name to per-environment source lists, for
    example ``{'app.js': {'debug': ['src/app.js', 'src/dev.js'],
    'production': ['src/app.js']}}``. Without bundles every top-level
    ``*.js`` file in the assets root is an entry point.
    """
    if not bundles:
        entry_points = find_files(assets_dir, ('.js',), recursive=False)
        if minify and not debug:
            return _transform_files(entry_points, assets_dir, target_dir, minify_js, 'JS')
        return copy_files(entry_points, assets_dir, target_dir)

    environment = 'debug' if debug else 'production'
    result = BuildResult()
    for name, sources in bundles.items():
        if isinstance(sources, dict):
            sources = sources.get(environment) or []
        try:
            parts = []
            for source in sources:
                with open(os.path.join(assets_dir, source), 'r', encoding='utf-8') as f:
                    parts.append(f.read())
            bundle = '\n'.join(parts)
            if minify and not debug:
                bundle = minify_js(bundle)
            target = os.path.join(target_dir, name)
            os.makedirs(os.path.dirname(target), exist_ok=True)
            with open(target, 'w', encoding='utf-8') as f:
                f.write(bundle)
            result.written.append(target)
            logger.debug(f"Bundled {len(parts)} scripts into {name}")
        except (IOError, OSError, PermissionError) as e:
            logger.error(f"Failed to build script bundle {name}: {e}")
            result.failed[name] = str(e)
    return result


def build_images(assets_dir, target_dir):
    return copy_files(find_files(assets_dir, IMAGE_EXTENSIONS), assets_dir, target_dir)


def build_fonts(assets_dir, target_dir):
    return copy_files(find_files(assets_dir, FONT_EXTENSIONS), assets_dir, target_dir)


def build_uploads(uploads_dir, target_dir):
    """Copy the uploads tree to ``target/<uploads dir name>/``."""
    name = os.path.basename(os.path.normpath(uploads_dir))
    return copy_files(find_files(uploads_dir), uploads_dir, os.path.join(target_dir, name))


def clean(target_dir):
    """Remove everything inside target_dir, keeping the directory itself."""
    if not os.path.isdir(target_dir):
        os.makedirs(target_dir, exist_ok=True)
        return 0
    removed = 0
    for item in os.listdir(target_dir):
        item_path = os.path.join(target_dir, item)
        if os.path.isdir(item_path) and not os.path.islink(item_path):
            shutil.rmtree(item_path)
        else:
            os.remove(item_path)
        removed += 1
    return removed
