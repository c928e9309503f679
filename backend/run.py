from volleyscore import create_app, socketio

app = create_app()

if __name__ == '__main__':
    # Use SocketIO server so live score updates reach clients in dev
    socketio.run(app, debug=True)
