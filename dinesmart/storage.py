import os
import uuid
from contextlib import contextmanager

from flask import current_app
from werkzeug.utils import secure_filename


def save_upload(file):
    """Store an uploaded file and return the path it is served from."""
    if file is None or not file.filename:
        return None
    folder = current_app.config['UPLOAD_FOLDER']
    os.makedirs(folder, exist_ok=True)
    filename = f"{uuid.uuid4().hex}_{secure_filename(file.filename)}"
    file.save(os.path.join(folder, filename))
    return f'/uploads/{filename}'


def discard_upload(path):
    filename = path.rsplit('/', 1)[-1]
    try:
        os.remove(os.path.join(current_app.config['UPLOAD_FOLDER'], filename))
    except FileNotFoundError:
        pass


@contextmanager
def staged_upload(file):
    """Save ``file`` for the duration of the block and remove it if the block fails."""
    path = save_upload(file)
    try:
        yield path
    except Exception:
        if path:
            discard_upload(path)
            current_app.logger.info('Discarded upload %s of a failed request', path)
        raise
