"""
Storn Backend Server Entry Point
"""
import os
import sys

from storn import create_app

if __name__ == '__main__':
    app = create_app()

    # Debug mode detection:
    # 1. Check FLASK_DEBUG environment variable
    # 2. Check command line argument --debug
    # 3. Default to True when run directly, unless PRODUCTION is configured
    flask_debug_env = os.environ.get('FLASK_DEBUG', '').lower()
    has_debug_arg = '--debug' in sys.argv

    debug_mode = (
        flask_debug_env == 'true' or
        has_debug_arg or
        (flask_debug_env != 'false' and not app.config.get('PRODUCTION', False))
    )

    port = int(os.environ.get('PORT', 5000))
    mode = 'DEBUG MODE' if debug_mode else 'PRODUCTION MODE'
    app.logger.info("Starting Storn Analytics API (%s) on http://localhost:%d", mode, port)

    app.run(
        debug=debug_mode,
        use_reloader=debug_mode,
        host='0.0.0.0',
        port=port,
        threaded=True
    )
