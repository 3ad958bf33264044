from pongserver import create_app, socketio

app = create_app()

if __name__ == '__main__':
    app.logger.info(f"Listening on {app.config['PORT']}")
    socketio.run(app, host=app.config['HOST'], port=app.config['PORT'], allow_unsafe_werkzeug=True)
