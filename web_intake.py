#!/usr/bin/env python3
"""
Web API for the case intake interview.

Endpoints:
- POST /api/start    start an interview, returns the opening question
- POST /api/respond  answer the current question
- GET  /api/state    progress snapshot of a session
- POST /api/reset    start a new case in the same session
- POST /api/end      end the interview and return its summary
- GET  /api/phases   phase sequence for an analysis depth

Run:
    python3 web_intake.py

Then POST to: http://localhost:5001/api/start
"""

import logging
import os
import secrets
import threading
from datetime import datetime

from flask import Flask, request, jsonify

from case_intake.config import AnalysisDepth, IntakeSettings
from case_intake.phases import CONVERSATION_PHASES, phase_sequence
from case_intake.session import InterviewSession

logger = logging.getLogger(__name__)

app = Flask(__name__)
app.secret_key = os.environ.get("FLASK_SECRET_KEY") or secrets.token_hex(16)

# Interview sessions per session_id
sessions = {}
sessions_lock = threading.Lock()

SESSION_TTL_SECONDS = 4 * 3600  # Idle sessions are dropped after 4 hours


def _base_settings() -> IntakeSettings:
    return app.config.get("INTAKE_SETTINGS") or IntakeSettings.from_env()


def _prune_idle_sessions():
    """Remove sessions idle for longer than SESSION_TTL_SECONDS. Caller holds sessions_lock."""
    now = datetime.now()
    expired = [
        sid for sid, entry in sessions.items()
        if (now - entry["last_active"]).total_seconds() > SESSION_TTL_SECONDS
    ]
    for sid in expired:
        del sessions[sid]
    if expired:
        logger.info("Pruned %d idle session(s)", len(expired))


def _get_entry(session_id):
    if not isinstance(session_id, str):
        return None
    with sessions_lock:
        entry = sessions.get(session_id)
        if entry is not None:
            entry["last_active"] = datetime.now()
        return entry


def _payload() -> dict:
    return request.get_json(silent=True) or {}


@app.route('/api/start', methods=['POST'])
def start_interview():
    data = _payload()
    base = _base_settings()

    raw_depth = data.get('depth')
    try:
        depth = AnalysisDepth.from_string(str(raw_depth)) if raw_depth else base.depth
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    settings = IntakeSettings(
        depth=depth,
        country=str(data.get('country') or base.country).strip(),
        use_llm=base.use_llm,
        policy=base.policy
    )
    interview = InterviewSession(settings)
    question = interview.start()

    session_id = secrets.token_hex(8)
    with sessions_lock:
        _prune_idle_sessions()
        sessions[session_id] = {
            'session': interview,
            'lock': threading.Lock(),
            'last_active': datetime.now()
        }
    logger.info("Interview %s started (%s)", session_id, depth.value)

    return jsonify({
        'session_id': session_id,
        'question': question,
        'phase': interview.orchestrator.current_phase.value,
        'depth': depth.value,
        'country': settings.country
    })


@app.route('/api/respond', methods=['POST'])
def respond():
    data = _payload()
    entry = _get_entry(data.get('session_id'))

    if entry is None:
        return jsonify({'error': 'Invalid session'}), 400

    response_text = data.get('response', '')
    if not isinstance(response_text, str):
        return jsonify({'error': 'response must be a string'}), 400

    with entry['lock']:
        interview = entry['session']
        result = interview.respond(response_text)
        state = interview.orchestrator.snapshot()

    decision = result.decision
    return jsonify({
        'question': result.next_question,
        'is_follow_up': decision.should_follow_up,
        'follow_up_reason': decision.follow_up_reason,
        'phase': decision.next_phase.value,
        'phase_name': CONVERSATION_PHASES[decision.next_phase].name,
        'transitioned': decision.transitioned,
        'complete': result.finished,
        'decision': decision.to_dict(),
        'state': state
    })


@app.route('/api/state', methods=['GET'])
def get_state():
    entry = _get_entry(request.args.get('session_id'))

    if entry is None:
        return jsonify({'error': 'Invalid session'}), 400

    with entry['lock']:
        interview = entry['session']
        return jsonify({
            'question': interview.current_question,
            'complete': interview.is_finished,
            'state': interview.orchestrator.snapshot()
        })


@app.route('/api/reset', methods=['POST'])
def reset_interview():
    data = _payload()
    entry = _get_entry(data.get('session_id'))

    if entry is None:
        return jsonify({'error': 'Invalid session'}), 400

    with entry['lock']:
        interview = entry['session']
        question = interview.new_case()
        return jsonify({
            'question': question,
            'phase': interview.orchestrator.current_phase.value,
            'state': interview.orchestrator.snapshot()
        })


@app.route('/api/end', methods=['POST'])
def end_interview():
    data = _payload()
    session_id = data.get('session_id')

    with sessions_lock:
        entry = sessions.pop(session_id, None) if isinstance(session_id, str) else None

    if entry is None:
        return jsonify({'error': 'Invalid session'}), 400

    with entry['lock']:
        summary = entry['session'].summary()
    logger.info("Interview %s ended", session_id)

    return jsonify({'summary': summary})


@app.route('/api/phases', methods=['GET'])
def list_phases():
    try:
        raw_depth = request.args.get('depth')
        depth = AnalysisDepth.from_string(raw_depth) if raw_depth else AnalysisDepth.STANDARD
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    return jsonify({
        'depth': depth.value,
        'phases': [
            {
                'id': phase.value,
                'name': CONVERSATION_PHASES[phase].name,
                'description': CONVERSATION_PHASES[phase].description,
                'min_questions': CONVERSATION_PHASES[phase].min_questions
            }
            for phase in phase_sequence(depth)
        ]
    })


if __name__ == '__main__':
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    print("""
╔═══════════════════════════════════════════════════════════════╗
║     CASE INTAKE INTERVIEW - WEB API                           ║
╠═══════════════════════════════════════════════════════════════╣
║  POST /api/start    Start an interview                        ║
║  POST /api/respond  Answer the current question               ║
║  GET  /api/state    Progress of a session                     ║
║  POST /api/end      Finish and get the summary                ║
╚═══════════════════════════════════════════════════════════════╝

Starting web server on http://localhost:5001

Press Ctrl+C to stop the server.
    """)

    app.run(debug=os.environ.get("FLASK_DEBUG") == "1", host='0.0.0.0', port=5001)
