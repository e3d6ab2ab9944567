"""
Flask web console for the confined-space trainer.
Serves the trainer and HMI views as JSON and accepts their commands.
"""
import os
import logging
import threading
from functools import wraps
from flask import Flask, jsonify, request
from flask_cors import CORS
from flask_login import LoginManager, UserMixin, login_user, logout_user, current_user
from werkzeug.security import generate_password_hash, check_password_hash
from werkzeug.serving import make_server

from plantsim import (
    TrainingEngine, CommandSurface, CommandError, PlantStatus, Viewpoint,
    THRESHOLD_KEYS, get_simulation_parameters
)

logger = logging.getLogger("WebGUI")

ROLE_TRAINER = "trainer"
ROLE_HMI = "hmi"


class User(UserMixin):
    """Console user. The role decides which viewpoint of the plant is served."""

    def __init__(self, id: str, username: str, password_hash: str, role: str = ROLE_HMI):
        self.id = id
        self.username = username
        self.password_hash = password_hash
        self.role = role

    @property
    def viewpoint(self) -> str:
        return Viewpoint.TRAINER.value if self.role == ROLE_TRAINER else Viewpoint.HMI.value

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password_hash, password)


class UserStore:
    """
    In-memory user store: one trainer and one student account.
    """

    def __init__(self):
        self._users = {}
        trainer_pass = os.environ.get("TRAINER_PASSWORD", "trainer123")
        student_pass = os.environ.get("STUDENT_PASSWORD", "student123")

        self.add_user("1", "trainer", trainer_pass, ROLE_TRAINER)
        self.add_user("2", "student", student_pass, ROLE_HMI)

    def add_user(self, id: str, username: str, password: str, role: str = ROLE_HMI):
        self._users[id] = User(id, username, generate_password_hash(password), role)
        self._users[username] = self._users[id]  # Index by username too

    def get_by_id(self, user_id: str) -> User:
        return self._users.get(user_id)

    def get_by_username(self, username: str) -> User:
        return self._users.get(username)


def hmi_view(engine: TrainingEngine) -> dict:
    """HMI snapshot plus the button enablement the student panel needs."""
    data = engine.snapshot(Viewpoint.HMI.value)
    data['shutdown_enabled'] = (data['has_critical_alarm']
                                and not data['is_emergency']
                                and data['plant_status'] == PlantStatus.RUNNING.value)
    data['support_enabled'] = not data['is_emergency']
    return data


def create_app(engine: TrainingEngine, commands: CommandSurface = None) -> Flask:
    """
    Factory function to create Flask app with injected engine.
    """
    app = Flask(__name__)

    # Configuration
    app.config['SECRET_KEY'] = os.environ.get("SECRET_KEY", "dev-secret-change-in-production")
    app.config['engine'] = engine
    app.config['commands'] = commands or CommandSurface(engine)

    CORS(app, supports_credentials=True)

    # Setup Flask-Login
    login_manager = LoginManager()
    login_manager.init_app(app)

    # User store
    user_store = UserStore()
    app.config['user_store'] = user_store

    @login_manager.user_loader
    def load_user(user_id):
        return user_store.get_by_id(user_id)

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'error': 'Authentication required'}), 401

    @app.errorhandler(CommandError)
    def handle_command_error(e):
        return jsonify({'error': str(e)}), 400

    def login_required(f):
        """Decorator for API routes - returns JSON error instead of redirect."""
        @wraps(f)
        def decorated(*args, **kwargs):
            if not current_user.is_authenticated:
                return jsonify({'error': 'Authentication required'}), 401
            return f(*args, **kwargs)
        return decorated

    def trainer_required(f):
        """Decorator for trainer-only routes."""
        @wraps(f)
        def decorated(*args, **kwargs):
            if not current_user.is_authenticated:
                return jsonify({'error': 'Authentication required'}), 401
            if current_user.role != ROLE_TRAINER:
                return jsonify({'error': 'Trainer access required'}), 403
            return f(*args, **kwargs)
        return decorated

    def body() -> dict:
        return request.get_json(silent=True) or {}

    def respond(applied: bool):
        eng = app.config['engine']
        if current_user.role == ROLE_TRAINER:
            state = eng.snapshot(Viewpoint.TRAINER.value)
        else:
            state = hmi_view(eng)
        return jsonify({'success': True, 'applied': applied, 'state': state})

    # --- Auth Routes ---

    @app.route('/login', methods=['POST'])
    def login():
        """Login handler (form or JSON body)."""
        data = request.get_json(silent=True) or request.form
        username = (data.get('username') or '').strip()
        password = data.get('password') or ''

        user = user_store.get_by_username(username)
        if user and user.check_password(password):
            login_user(user, remember=bool(data.get('remember', False)))
            logger.info(f"User '{username}' logged in")
            return jsonify({'success': True, 'username': user.username, 'role': user.role})

        logger.warning(f"Failed login attempt for '{username}'")
        return jsonify({'error': 'Invalid username or password'}), 401

    @app.route('/logout')
    @login_required
    def logout():
        """Logout handler."""
        logger.info(f"User '{current_user.username}' logged out")
        logout_user()
        return jsonify({'success': True})

    @app.route('/api/user')
    @login_required
    def get_current_user():
        return jsonify({
            'username': current_user.username,
            'role': current_user.role,
            'viewpoint': current_user.viewpoint,
        })

    # --- Read-only views ---

    @app.route('/api/state')
    @login_required
    def get_state():
        """
        Plant state for the caller's viewpoint. A trainer may preview the
        student panel with ?view=hmi; students always get the HMI view.
        """
        eng = app.config['engine']
        view = request.args.get('view', current_user.viewpoint)
        if current_user.role != ROLE_TRAINER or view == Viewpoint.HMI.value:
            return jsonify(hmi_view(eng))
        if view != Viewpoint.TRAINER.value:
            return jsonify({'error': f'Unknown view: {view}'}), 400
        return jsonify(eng.snapshot(Viewpoint.TRAINER.value))

    @app.route('/api/log')
    @login_required
    def get_log():
        """Audit log, most recent first. ?limit=N trims it."""
        entries = app.config['engine'].log_entries()
        limit = request.args.get('limit')
        if limit is not None:
            try:
                entries = entries[:max(0, int(limit))]
            except ValueError:
                return jsonify({'error': 'limit must be an integer'}), 400
        return jsonify({'entries': entries, 'count': len(entries)})

    @app.route('/api/scenarios')
    @login_required
    def get_scenarios():
        return jsonify({'scenarios': app.config['engine'].catalog.describe()})

    @app.route('/api/parameters', methods=['GET'])
    @login_required
    def get_parameters():
        params = get_simulation_parameters()
        return jsonify({
            'parameters': params.get_by_category(),
            'slider_policy': params.slider_policy.value,
        })

    @app.route('/api/parameters', methods=['POST'])
    @trainer_required
    def update_parameters():
        """
        Update tunables; values are clamped to their ranges. Live alarm
        thresholds belong to /api/trainer/threshold and are refused here.
        """
        params = get_simulation_parameters()
        data = body()
        values = data.get('values') or {}
        if not isinstance(values, dict):
            return jsonify({'error': 'values must be an object'}), 400

        thresholds = sorted(k for k in values if k in THRESHOLD_KEYS)
        if thresholds:
            return jsonify({'error': f"Set {', '.join(thresholds)} via /api/trainer/threshold"}), 400

        policy = data.get('slider_policy')
        if policy is not None:
            try:
                params.slider_policy = policy
            except ValueError:
                return jsonify({'error': f'Unknown slider policy: {policy}'}), 400

        results = params.set_multiple(values)
        logger.info(f"Trainer '{current_user.username}' updated parameters: {results}")
        return jsonify({
            'success': all(results.values()),
            'results': results,
            'slider_policy': params.slider_policy.value,
        })

    @app.route('/api/overrides')
    @trainer_required
    def get_overrides():
        """Active display overrides (comms freeze)."""
        eng = app.config['engine']
        overrides = eng.overlay.get_all_overrides()
        return jsonify({'overrides': overrides, 'count': len(overrides)})

    # --- Trainer commands ---

    @app.route('/api/trainer/scenario', methods=['POST'])
    @trainer_required
    def start_scenario():
        scenario_id = body().get('scenario_id', 3)
        return respond(app.config['commands'].start_scenario(scenario_id))

    @app.route('/api/trainer/fault', methods=['POST'])
    @trainer_required
    def inject_fault():
        return respond(app.config['commands'].inject_fault(body().get('component')))

    @app.route('/api/trainer/shutdown', methods=['POST'])
    @trainer_required
    def trainer_shutdown():
        return respond(app.config['commands'].controlled_shutdown('TRAINER'))

    @app.route('/api/trainer/reset', methods=['POST'])
    @trainer_required
    def reset_system():
        logger.info(f"Trainer '{current_user.username}' reset the simulation")
        return respond(app.config['commands'].reset())

    @app.route('/api/trainer/toggle', methods=['POST'])
    @trainer_required
    def toggle():
        return respond(app.config['commands'].toggle(body().get('key')))

    @app.route('/api/trainer/slider', methods=['POST'])
    @trainer_required
    def set_slider():
        data = body()
        if data.get('value') is None:
            return jsonify({'error': 'value is required'}), 400
        return respond(app.config['commands'].set_slider(data.get('key'), data['value']))

    @app.route('/api/trainer/threshold', methods=['POST'])
    @trainer_required
    def set_threshold():
        data = body()
        if data.get('value') is None:
            return jsonify({'error': 'value is required'}), 400
        return respond(app.config['commands'].set_threshold(data.get('key'), data['value']))

    @app.route('/api/trainer/clear-alarm', methods=['POST'])
    @trainer_required
    def clear_alarm():
        return respond(app.config['commands'].clear_alarm(body().get('code')))

    @app.route('/api/trainer/comms-loss', methods=['POST'])
    @trainer_required
    def simulate_comms_loss():
        return respond(app.config['commands'].simulate_comms_loss())

    # --- HMI commands ---

    @app.route('/api/hmi/shutdown', methods=['POST'])
    @login_required
    def hmi_shutdown():
        return respond(app.config['commands'].controlled_shutdown('HMI'))

    @app.route('/api/hmi/support', methods=['POST'])
    @login_required
    def request_support():
        return respond(app.config['commands'].request_support())

    # --- Audio ---

    @app.route('/api/audio/cues')
    @login_required
    def get_audio_cues():
        """Drain queued cues for the browser to play."""
        audio = app.config['engine'].audio
        return jsonify({'cues': audio.drain(), 'muted': audio.muted})

    @app.route('/api/audio/mute', methods=['POST'])
    @login_required
    def set_mute():
        data = body()
        muted = data.get('muted')
        if muted is None:
            muted = not app.config['engine'].audio.muted
        app.config['commands'].set_muted(bool(muted))
        return jsonify({'success': True, 'muted': app.config['engine'].audio.muted})

    return app


class WebServer:
    """Serves the console on a Werkzeug server thread beside the engine."""

    def __init__(self, engine: TrainingEngine, host: str = "0.0.0.0", port: int = 8080,
                 commands: CommandSurface = None):
        self._engine = engine
        self._commands = commands
        self._host = host
        self._port = port
        self._server = None
        self._thread = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self._server is not None:
            return
        # Bind here so a busy port fails the caller, not the thread
        self._server = make_server(self._host, self._port,
                                   create_app(self._engine, self._commands), threaded=True)
        self._thread = threading.Thread(target=self._server.serve_forever,
                                        name="WebConsole", daemon=True)
        self._thread.start()
        logger.info(f"Web console started on http://{self._host}:{self._port}")

    def stop(self) -> None:
        server, self._server = self._server, None
        if server is None:
            return
        server.shutdown()
        self._thread.join()
        self._thread = None
        logger.info("Web console stopped")
