"""
A minimal static web server which parses HTTP request lines,
dispatches them to controllers and serves files from a document root.

uri syntax:

http://[hostname]:{port}[/?[root={dir}][&index={file}]]

hostname defaults to 0.0.0.0, port defaults to 80,
root defaults to the current directory,
index defaults to /index.html and is served for both / and the index path.

examples:

# serve ./webapp on port 8080
staticweb -v 'http://:8080/?root=./webapp'

# two listeners, different roots
staticweb -vv 'http://127.0.0.1:8080/?root=./site' 'http://:8081/?root=./docs'
"""
__version__ = "0.1.0"
