import os

from dotenv import load_dotenv

load_dotenv()

from folio import create_app, get_autosaver, get_repository, get_store  # noqa: E402

app = create_app(os.getenv('FLASK_CONFIG') or 'development')


@app.shell_context_processor
def make_shell_context():
    return {
        'store': get_store(),
        'posts': get_repository(),
        'autosaver': get_autosaver,
    }


if __name__ == '__main__':
    app.run(debug=True)
