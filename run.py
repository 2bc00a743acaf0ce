import atexit
import os
from dotenv import load_dotenv
load_dotenv()

env = os.environ.get('FLASK_ENV', 'development')
from tvsaude import create_app, db, start_background_services, stop_background_services

app = create_app(env)

if __name__ == '__main__':
    with app.app_context():
        db.create_all()
    start_background_services(app)
    atexit.register(stop_background_services, app)
    # Sem reloader: ele duplicaria os timers do agendador e do sincronizador
    app.run(debug=(env == 'development'), port=int(os.environ.get('PORT', 5000)), use_reloader=False)
