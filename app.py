import os
import sys
import logging

from dotenv import load_dotenv

from flask import Flask, request, jsonify
from flask_cors import CORS
from flask_socketio import SocketIO
from flask_wtf.csrf import CSRFProtect
from datetime import date, datetime

load_dotenv()
from config import Config
from utils import store
from utils import database
from utils.auth import hash_password, check_password, login_user, logout_user, get_current_user
from utils.channels import ChannelRegistry
from utils.helpers import normalize_to_date, normalize_time, normalize_choice, parse_id, serialize_row, serialize_rows
from utils.poller import NotificationPoller
from utils.scheduling import ApplicationNotFound, INTERVIEW_MODES, INTERVIEW_RESULTS, schedule_interview
from utils.status import APPLICATION_STATUSES, ApplicationStatus

logging.basicConfig(
    level=getattr(logging, Config.LOG_LEVEL, logging.INFO),
    format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
)
log = logging.getLogger(__name__)


def _parse_origins(value):
    if not value or value.strip() == "*":
        return "*"
    return [o.strip() for o in value.split(",") if o.strip()]


app = Flask(__name__)
app.config.from_object(Config)
csrf = CSRFProtect(app)
# CSRF configuration: enable by default, allow override via env var
app.config['WTF_CSRF_ENABLED'] = os.environ.get('WTF_CSRF_ENABLED', 'true').lower() in ('1', 'true', 'yes')
app.config['SESSION_COOKIE_HTTPONLY'] = True
app.config['SESSION_COOKIE_SAMESITE'] = os.environ.get('SESSION_COOKIE_SAMESITE', 'Lax')

_origins = _parse_origins(app.config.get('CORS_ORIGINS'))
CORS(app, resources={r"/api/*": {"origins": _origins}})
socketio = SocketIO(app, cors_allowed_origins=_origins, async_mode='threading')


def _emit_to_session(session_id, event, payload):
    socketio.emit(event, payload, to=session_id)


registry = ChannelRegistry(_emit_to_session)
poller = NotificationPoller(
    store,
    registry,
    interval_ms=app.config['NOTIF_POLL_INTERVAL_MS'],
    app_context=app.app_context,
)


@app.teardown_appcontext
def teardown_database(exception=None):
    """Return the pooled connection after each request or poller tick."""
    database.close_db(exception)


def json_body():
    return request.get_json(silent=True) or {}


def bad_request(message):
    return jsonify({'error': message}), 400


def server_error(context):
    log.exception('%s error', context)
    return jsonify({'error': 'Server error'}), 500


# ----------------------
# Socket gateway
# ----------------------

@socketio.on('connect')
def handle_connect(auth=None):
    registry.on_connect(request.sid)


@socketio.on('identify')
def handle_identify(payload=None):
    registry.on_identify(request.sid, payload)


@socketio.on('disconnect')
def handle_disconnect(reason=None):
    registry.on_disconnect(request.sid)


# ----------------------
# Health
# ----------------------

@app.route('/api/health', methods=['GET'])
def health():
    return jsonify({'ok': True, 'db': database.get_db() is not None, 'poller': poller.running})


# ----------------------
# Auth - users and admins
# ----------------------

@app.route('/api/auth/register', methods=['POST'])
@csrf.exempt
def register():
    data = json_body()
    name = (data.get('name') or '').strip()
    email = (data.get('email') or '').strip().lower()
    password = data.get('password') or ''
    if not name or not email or not password:
        return bad_request('name, email and password required')

    try:
        if store.find_user_by_email(email):
            return jsonify({'error': 'User exists'}), 409
        user = store.create_user(name, email, hash_password(password), data.get('contact') or '')
        return jsonify({'user': user})
    except Exception:
        return server_error('/api/auth/register')


@app.route('/api/auth/login', methods=['POST'])
@csrf.exempt
def login():
    data = json_body()
    email = (data.get('email') or '').strip().lower()
    password = data.get('password') or ''
    if not email or not password:
        return bad_request('email and password required')

    try:
        row = store.find_user_by_email(email)
        if not row or not check_password(row.get('password'), password):
            return jsonify({'error': 'Invalid credentials'}), 401
        user = {k: row.get(k) for k in ('userID', 'name', 'email', 'contact_info')}
        login_user(user['userID'], 'user', user['email'], user['name'])
        return jsonify({'user': user})
    except Exception:
        return server_error('/api/auth/login')


@app.route('/api/admin/login', methods=['POST'])
@csrf.exempt
def admin_login():
    data = json_body()
    email = (data.get('email') or '').strip().lower()
    password = data.get('password') or ''
    if not email or not password:
        return bad_request('email and password required')

    try:
        row = store.find_admin_by_email(email)
        if not row or not check_password(row.get('password'), password):
            log.warning('Failed admin login for %s', email)
            return jsonify({'error': 'Invalid credentials'}), 401
        admin = {'adminID': row['adminID'], 'name': row.get('name'), 'email': row.get('email')}
        login_user(admin['adminID'], 'admin', admin['email'], admin['name'])
        return jsonify({'admin': admin})
    except Exception:
        return server_error('/api/admin/login')


@app.route('/api/auth/logout', methods=['POST'])
@csrf.exempt
def logout():
    logout_user()
    return jsonify({'ok': True})


@app.route('/api/auth/me', methods=['GET'])
def current_account():
    user = get_current_user()
    if not user:
        return jsonify({'error': 'Authentication required'}), 401
    return jsonify({'account': user})


# ----------------------
# Applications
# ----------------------

@app.route('/api/applications', methods=['GET'])
def list_applications():
    try:
        return jsonify(serialize_rows(store.list_applications()))
    except Exception:
        return server_error('GET /api/applications')


@app.route('/api/applications/<int:application_id>', methods=['PATCH'])
@csrf.exempt
def update_application_status(application_id):
    """Manual status override. Terminal statuses are not protected here."""
    status = normalize_choice(json_body().get('status'), APPLICATION_STATUSES)
    if not status:
        return bad_request(f"status must be one of: {', '.join(APPLICATION_STATUSES)}")

    try:
        if not store.get_application(application_id):
            return jsonify({'error': 'Application not found'}), 404
        store.set_application_status(application_id, status)
        log.info('✅ Status updated manually: Application %s -> %s', application_id, status)
        return jsonify({'application': serialize_row(store.get_application(application_id))})
    except Exception:
        return server_error('PATCH /api/applications/<id>')


@app.route('/api/applications/<int:application_id>', methods=['DELETE'])
@csrf.exempt
def delete_application(application_id):
    try:
        store.delete_application(application_id)
        return jsonify({'ok': True})
    except Exception:
        return server_error('DELETE /api/applications/<id>')


# ----------------------
# Users
# ----------------------

@app.route('/api/users', methods=['GET'])
def list_users():
    try:
        return jsonify(store.list_users())
    except Exception:
        return server_error('GET /api/users')


@app.route('/api/users/<int:user_id>/applications', methods=['GET'])
def list_user_applications(user_id):
    try:
        return jsonify(serialize_rows(store.list_applications_for_user(user_id)))
    except Exception:
        return server_error('GET /api/users/<id>/applications')


# ----------------------
# Jobs / roles
# ----------------------

@app.route('/api/jobs', methods=['GET'])
def list_jobs():
    try:
        return jsonify(serialize_rows(store.list_job_roles()))
    except Exception:
        return server_error('GET /api/jobs')


@app.route('/api/roles', methods=['POST'])
@csrf.exempt
def create_role():
    data = json_body()
    company_id = parse_id(data.get('companyID'))
    role_title = (data.get('roleTitle') or '').strip()
    if not company_id or not role_title:
        return bad_request('companyID and roleTitle required')

    try:
        if not store.get_company(company_id):
            return jsonify({'error': 'Company not found'}), 404
        role = store.create_job_role(
            company_id,
            role_title,
            data.get('jobType') or '',
            data.get('description') or '',
            data.get('salaryRange') or '',
            data.get('location') or '',
        )
        return jsonify(role)
    except Exception:
        return server_error('POST /api/roles')


@app.route('/api/jobs/<int:role_id>/apply', methods=['POST'])
@csrf.exempt
def apply_to_role(role_id):
    data = json_body()
    user_id = parse_id(data.get('userID'))
    if not role_id or not user_id:
        return bad_request('roleID and userID are required')

    application_date = normalize_to_date(data.get('applicationDate')) or date.today().isoformat()
    deadline = normalize_to_date(data.get('deadline'))
    log.debug('Normalized dates -> applicationDate: %s deadline: %s', application_date, deadline)

    try:
        if not store.get_job_role(role_id):
            return jsonify({'error': 'Role not found'}), 404
        application = store.create_application(
            user_id,
            role_id,
            application_date,
            deadline,
            ApplicationStatus.APPLIED.value,
            resume=data.get('resume'),
            cover_letter=data.get('coverLetter'),
        )
        log.info('Inserted application id=%s', application and application.get('applicationID'))
        return jsonify({'application': serialize_row(application)})
    except Exception:
        return server_error('POST /api/jobs/<roleID>/apply')


# ----------------------
# Companies
# ----------------------

@app.route('/api/companies', methods=['GET'])
def list_companies():
    try:
        return jsonify(store.list_companies())
    except Exception:
        return server_error('GET /api/companies')


@app.route('/api/companies', methods=['POST'])
@csrf.exempt
def create_company():
    data = json_body()
    company_name = (data.get('companyName') or '').strip()
    if not company_name:
        return bad_request('companyName is required')

    try:
        company = store.create_company(
            company_name,
            data.get('location') or '',
            data.get('contactInfo') or '',
            data.get('industry') or '',
            data.get('city') or '',
            data.get('country') or '',
        )
        return jsonify(company)
    except Exception:
        return server_error('POST /api/companies')


# ----------------------
# Interviews
# ----------------------

@app.route('/api/interviews', methods=['POST'])
@csrf.exempt
def create_interview():
    data = json_body()
    application_id = parse_id(data.get('applicationID'))
    interview_date = normalize_to_date(data.get('interviewDate'))
    interview_mode = normalize_choice(data.get('interviewMode'), INTERVIEW_MODES)
    if not application_id or not data.get('interviewDate') or not data.get('interviewMode'):
        return bad_request('applicationID, interviewDate and interviewMode required')
    if not interview_date:
        return bad_request('interviewDate must be a date (YYYY-MM-DD)')
    if not interview_mode:
        return bad_request(f"interviewMode must be one of: {', '.join(INTERVIEW_MODES)}")
    result = normalize_choice(data.get('result'), INTERVIEW_RESULTS, default='Pending')
    if not result:
        return bad_request(f"result must be one of: {', '.join(INTERVIEW_RESULTS)}")

    try:
        interview, application = schedule_interview(
            application_id,
            interview_date,
            interview_mode,
            result=result,
            interview_time=normalize_time(data.get('interviewTime')),
            admin_id=parse_id(data.get('adminID')),
        )
    except ApplicationNotFound:
        return jsonify({'error': 'Application not found'}), 404
    except Exception:
        return server_error('POST /api/interviews')

    return jsonify({'interview': serialize_row(interview), 'application': serialize_row(application)})


# ----------------------
# Notifications
# ----------------------

@app.route('/api/notifications', methods=['POST'])
@csrf.exempt
def create_notification():
    data = json_body()
    notification_type = (data.get('type') or '').strip()
    application_id = parse_id(data.get('applicationID'))
    if not notification_type or not application_id:
        return bad_request('type and applicationID required')

    now = datetime.now()
    notification_date = normalize_to_date(data.get('date')) or now.strftime('%Y-%m-%d')
    notification_time = normalize_time(data.get('time')) or now.strftime('%H:%M:%S')

    try:
        if not store.get_application(application_id):
            return jsonify({'error': 'Application not found'}), 404
        notification_id = store.insert_notification(
            notification_type,
            notification_date,
            notification_time,
            application_id,
            parse_id(data.get('adminID')),
        )
        return jsonify({'notification': serialize_row(store.get_notification(notification_id))})
    except Exception:
        return server_error('POST /api/notifications')


@app.route('/api/notifications/<int:user_id>', methods=['GET'])
def list_user_notifications(user_id):
    try:
        return jsonify(serialize_rows(store.list_notifications_for_user(user_id)))
    except Exception:
        return server_error('GET /api/notifications/<userID>')


@app.route('/api/notifications/<int:notification_id>/read', methods=['PATCH', 'POST'])
@csrf.exempt
def mark_notification_read(notification_id):
    try:
        if not store.get_notification(notification_id):
            return jsonify({'error': 'Notification not found'}), 404
        store.mark_notification_read(notification_id)
        return jsonify({'notification': serialize_row(store.get_notification(notification_id))})
    except Exception:
        return server_error('PATCH /api/notifications/<id>/read')


@app.route('/api/users/<int:user_id>/notifications/read-all', methods=['POST'])
@csrf.exempt
def mark_all_notifications_read(user_id):
    try:
        store.mark_all_notifications_read(user_id)
        return jsonify({'ok': True})
    except Exception:
        return server_error('POST /api/users/<id>/notifications/read-all')


# ----------------------
# Errors
# ----------------------

@app.errorhandler(404)
def not_found(e):
    return jsonify({'error': 'Not found'}), 404


@app.errorhandler(405)
def method_not_allowed(e):
    return jsonify({'error': 'Method not allowed'}), 405



def run_server():
    host = app.config['HOST']
    port = app.config['PORT']
    debug_mode = os.environ.get('FLASK_DEBUG', 'False').lower() == 'true'

    poller.start()
    log.info('🚀 Backend running at http://%s:%s (debug=%s)', host, port, debug_mode)
    try:
        # Disable reloader so the poller thread is started exactly once
        socketio.run(app, host=host, port=port, debug=debug_mode, use_reloader=False, allow_unsafe_werkzeug=True)
    except KeyboardInterrupt:
        log.info('Server stopped by user.')
    except OSError as e:
        if 'address already in use' in str(e).lower():
            log.error('❌ Port %s is already in use. Set PORT to use a different port.', port)
        else:
            log.exception('❌ Critical error starting server: %s', e)
        return 1
    finally:
        poller.stop(timeout=app.config['NOTIF_POLL_INTERVAL_MS'] / 1000.0 + 5)
    return 0


if __name__ == '__main__':
    sys.exit(run_server())
