"""
Client tier of the DevHub: the compound dashboard's state, rendering and
exports, talking to the request tier over HTTP.
"""
