"""Reactor-style TCP networking: sockets, buffers, event loops and servers."""