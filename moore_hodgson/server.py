"""
HTTP API server for the Moore-Hodgson scheduler.

This module provides a Flask-based REST API that receives a set of jobs
and returns them split into on-time and late jobs.
"""

from flask import Flask, request, jsonify
from datetime import datetime
from typing import Dict, Any, List
import logging

from . import __version__
from .types import Job, Selection, SchedulingPolicy, ScheduleRequest, ScheduleResponse
from .algorithm import schedule, calculate_schedule_metrics


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='[%(asctime)s] %(levelname)s: %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger(__name__)


def parse_job(job_data: Any) -> Job:
    """
    Build a job from its JSON form.

    Accepts either ``{"label": .., "due": .., "duration": ..}`` or a
    ``[label, due, duration]`` array.

    Raises:
        KeyError: If an object is missing a field
        ValueError: If an array does not have three items
    """
    if isinstance(job_data, dict):
        return Job(
            label=job_data['label'],
            due=job_data['due'],
            duration=job_data['duration']
        )
    if isinstance(job_data, list):
        if len(job_data) != 3:
            raise ValueError(f"expected [label, due, duration], got {job_data!r}")
        return Job(*job_data)
    raise ValueError(f"expected an object or an array, got {job_data!r}")


def job_to_dict(job: Job) -> Dict[str, Any]:
    """Render a job as a JSON object."""
    return {
        'label': job.label,
        'due': job.due,
        'duration': job.duration
    }


def run_request(schedule_request: ScheduleRequest) -> ScheduleResponse:
    """
    Run the scheduler on a copy of the request's jobs.

    Args:
        schedule_request: Parsed request

    Returns:
        On-time and late jobs
    """
    jobs: List[Job] = list(schedule_request.jobs)
    on_time_count = schedule(jobs, schedule_request.policy)
    return ScheduleResponse(on_time=jobs[:on_time_count], late=jobs[on_time_count:])


def create_app(config: Dict[str, Any] = None) -> Flask:
    """
    Create and configure the Flask application.

    Args:
        config: Optional configuration dictionary

    Returns:
        Configured Flask app
    """
    app = Flask(__name__)

    # Default configuration
    app.config.update({
        'TESTING': False,
        'SELECTION': 'earliest',
        'MAX_JOBS': 2000,
    })

    # Apply custom config
    if config:
        app.config.update(config)

    # Create default policy
    policy = SchedulingPolicy(selection=Selection(app.config['SELECTION']))
    max_jobs = app.config['MAX_JOBS']

    @app.route('/health', methods=['GET'])
    def health():
        """Health check endpoint."""
        return jsonify({
            'status': 'healthy',
            'service': 'moore-hodgson',
            'version': __version__,
            'timestamp': datetime.utcnow().isoformat()
        })

    @app.route('/schedule', methods=['POST'])
    def schedule_jobs():
        """
        Split jobs into a maximum on-time set and late jobs.

        Request body:
        {
            "type": "schedule_request",
            "jobs": [
                {"label": "ApplyForJob", "due": 6, "duration": 5},
                ["FileTaxes", 7, 1]
            ],
            "selection": "earliest"
        }

        Response:
        {
            "type": "schedule_response",
            "on_time_count": 2,
            "on_time": [
                {"label": "ApplyForJob", "due": 6, "duration": 5},
                {"label": "FileTaxes", "due": 7, "duration": 1}
            ],
            "late": [],
            "metrics": {...}
        }
        """
        try:
            data = request.get_json(silent=True)

            if not data:
                return jsonify({'error': 'Empty request body'}), 400
            if not isinstance(data, dict):
                return jsonify({'error': 'Request body must be an object'}), 400

            jobs_data = data.get('jobs', [])
            if not isinstance(jobs_data, list):
                return jsonify({'error': 'jobs must be an array'}), 400
            if len(jobs_data) > max_jobs:
                logger.error(f"Rejected request with {len(jobs_data)} jobs (limit {max_jobs})")
                return jsonify({'error': f'Too many jobs: {len(jobs_data)} > {max_jobs}'}), 400

            # Parse jobs
            jobs = []
            for job_data in jobs_data:
                try:
                    jobs.append(parse_job(job_data))
                except (KeyError, ValueError) as e:
                    logger.error(f"Invalid job data: {e}")
                    return jsonify({'error': f'Invalid job data: {e}'}), 400

            # Parse policy
            request_policy = policy
            if 'selection' in data:
                try:
                    request_policy = SchedulingPolicy(selection=Selection(data['selection']))
                except ValueError as e:
                    logger.error(f"Invalid selection: {e}")
                    return jsonify({'error': f'Invalid selection: {e}'}), 400

            # Run scheduling algorithm
            try:
                response = run_request(ScheduleRequest(jobs=jobs, policy=request_policy))
            except (ValueError, TypeError) as e:
                logger.error(f"Cannot schedule jobs: {e}")
                return jsonify({'error': f'Invalid job data: {e}'}), 400

            scheduled = response.on_time + response.late
            metrics = calculate_schedule_metrics(scheduled, response.on_time_count)

            logger.info(
                f"Scheduled {len(scheduled)} jobs: "
                f"{response.on_time_count} on time, {len(response.late)} late"
            )
            logger.info(f"Metrics: {metrics}")

            return jsonify({
                'type': 'schedule_response',
                'on_time_count': response.on_time_count,
                'on_time': [job_to_dict(job) for job in response.on_time],
                'late': [job_to_dict(job) for job in response.late],
                'metrics': metrics
            }), 200

        except Exception as e:
            logger.error(f"Error scheduling jobs: {e}", exc_info=True)
            return jsonify({'error': str(e)}), 500

    @app.route('/policy', methods=['GET'])
    def get_policy():
        """
        Get current scheduling policy.

        The default "earliest" selection costs O(n^2 log n) per request,
        about a second for 2000 jobs; MAX_JOBS caps requests accordingly.
        """
        return jsonify({
            'selection': policy.selection.value,
            'max_jobs': max_jobs
        })

    @app.errorhandler(404)
    def not_found(error):
        """Handle 404 errors."""
        return jsonify({'error': 'Not found'}), 404

    @app.errorhandler(500)
    def internal_error(error):
        """Handle 500 errors."""
        logger.error(f"Internal server error: {error}")
        return jsonify({'error': 'Internal server error'}), 500

    return app


def run_server(host: str = '0.0.0.0', port: int = 8002, debug: bool = False):
    """
    Run the scheduler HTTP server.

    Args:
        host: Host to bind to
        port: Port to listen on
        debug: Enable debug mode
    """
    logger.info("=" * 50)
    logger.info("  Moore-Hodgson Scheduler Server (Python)")
    logger.info("=" * 50)
    logger.info("")
    logger.info(f"Starting server on {host}:{port}")
    logger.info("")
    logger.info("Endpoints:")
    logger.info(f"  POST {host}:{port}/schedule - Schedule jobs")
    logger.info(f"  GET  {host}:{port}/health   - Health check")
    logger.info(f"  GET  {host}:{port}/policy   - Get policy")
    logger.info("")

    app = create_app()
    app.run(host=host, port=port, debug=debug)


if __name__ == '__main__':
    run_server()
