# Public blog routes, cache revalidation and storage diagnostics
from flask import abort, current_app, jsonify
from flask_login import login_required

from folio import get_render_cache, get_repository, get_store
from folio.cache import BLOG_INDEX_PATH, blog_post_path
from folio.main import bp
from folio.utils import format_date, json_object_body


@bp.route('/blog')
def blog_index():
    """
    Published posts, newest first. Cached until revalidated
    """
    cache = get_render_cache()
    payload = cache.get(BLOG_INDEX_PATH)
    if payload is None:
        payload = []
        for meta in get_repository().list_meta():
            entry = meta.to_dict()
            entry['displayDate'] = format_date(meta.date)
            payload.append(entry)
        cache.set(BLOG_INDEX_PATH, payload)
    return jsonify({'posts': payload})


@bp.route('/blog/<slug>')
def blog_post(slug):
    """
    A single published post, rendered. Drafts are never served here
    """
    cache = get_render_cache()
    path = blog_post_path(slug)
    payload = cache.get(path)
    if payload is None:
        post = get_repository().get_by_slug(slug)
        if post is None or not post.meta.is_published:
            abort(404)
        payload = post.to_dict()
        payload['meta']['displayDate'] = format_date(post.meta.date)
        cache.set(path, payload)
    return jsonify(payload)


@bp.route('/revalidate', methods=['POST'])
@login_required
def revalidate():
    """
    Drop cached renders of the blog index, an optional post and any extra paths.
    A missing or malformed body still refreshes the index.
    """
    body = json_object_body() or {}
    paths = [BLOG_INDEX_PATH]

    slug = body.get('slug')
    if isinstance(slug, str) and slug:
        paths.append(blog_post_path(slug))

    extra = body.get('paths')
    if isinstance(extra, list):
        paths.extend(p for p in extra if isinstance(p, str) and p.startswith('/'))

    get_render_cache().invalidate(paths)
    current_app.logger.info(f'Revalidated {paths}')
    return jsonify({'ok': True, 'revalidated': paths})


@bp.route('/admin/storage')
@login_required
def storage_status():
    """
    Which backend is active and what it holds, drafts included
    """
    metas = get_repository().list_meta(include_drafts=True)
    return jsonify({
        'ok': True,
        'backend': get_store().name,
        'count': len(metas),
        'posts': [meta.to_dict() for meta in metas],
    })
