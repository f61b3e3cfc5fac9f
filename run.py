import os
from coordconv import create_app

default_config = 'development'

# Explicitly set to production via env var
if os.environ.get('FLASK_CONFIG') == 'production':
    default_config = 'production'

app = create_app(default_config)
print(f" * Application running in {default_config} mode")

if __name__ == '__main__':
    # 正式部署时请使用 WSGI 服务器: gunicorn -w 4 -b 127.0.0.1:5000 run:app
    app.run(debug=False, host='0.0.0.0', port=5000)
