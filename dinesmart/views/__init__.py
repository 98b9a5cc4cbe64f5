from flask import request


def request_data():
    # Формы (multipart) приходят с изображением, остальное в JSON
    if request.form or request.files:
        return request.form.to_dict()
    return request.get_json(silent=True) or {}
