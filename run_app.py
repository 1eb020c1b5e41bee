#!/usr/bin/env python3
import sys
import os

# Add src to path so pmtables package can be found
current_dir = os.path.dirname(os.path.abspath(__file__))
src_dir = os.path.join(current_dir, 'src')
sys.path.insert(0, src_dir)

from server.main import create_app

if __name__ == "__main__":
    host = os.environ.get('PMTABLES_HOST', '0.0.0.0')
    port = int(os.environ.get('PMTABLES_PORT', '5000'))
    app = create_app()
    print(f"Starting pmtables decoding service on http://localhost:{port}")
    app.run(debug=os.environ.get('PMTABLES_DEBUG') == '1', host=host, port=port)
