from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, render_template

from pastebin_lite.api.pastes import get_paste_service, reference_time


views_bp = Blueprint("views", __name__)


@views_bp.route("/", methods=["GET"])
def index():
    """Home page with the paste creation form."""
    return render_template("index.html"), HTTPStatus.OK


@views_bp.route("/p/<paste_id>", methods=["GET"])
def view_paste(paste_id: str):
    """
    Render a paste as HTML.

    Viewing the page does not spend one of the paste's views.
    """
    paste = get_paste_service().preview_paste(paste_id, now=reference_time())
    if paste is None:
        return render_template("not_found.html", paste_id=paste_id), HTTPStatus.NOT_FOUND

    return render_template("paste.html", paste=paste), HTTPStatus.OK
