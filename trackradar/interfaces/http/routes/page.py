import logging

from flask import Blueprint, current_app, render_template, request

from trackradar.presentation.analyzer import AnalyzerView, SearchState

logger = logging.getLogger(__name__)

page_bp = Blueprint('page_bp', __name__)


@page_bp.route('/', methods=['GET'])
def analyzer_page():
    """Render the analyzer: ``?q=`` searches, ``&track=<id>`` charts one of the hits."""
    view = AnalyzerView(current_app.extensions['catalog_proxy'])

    query = request.args.get('q')
    track_id = request.args.get('track')
    if query is not None:
        view.search(query)
    if track_id and view.search_state is SearchState.RESULTS_SHOWN:
        view.select_track_by_id(track_id)

    return render_template('index.html', view=view.display())
