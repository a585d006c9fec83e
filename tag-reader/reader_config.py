#!/usr/bin/env python3

import configparser
import os
import socket
import sys
import traceback

import rfid_base

tag_reader_dir = os.path.dirname(os.path.abspath(__file__))
app_dir = os.path.dirname(tag_reader_dir)
etc_dir = os.path.join(app_dir, 'etc')
default_config_fn = os.path.join(etc_dir, 'tag-reader.ini')

def load_section(fn, hostname=None):
    if hostname is None:
        hostname = socket.gethostname()
    config = configparser.ConfigParser(inline_comment_prefixes=('#'))
    config.read(fn)
    sec_names = [
        'conf.' + hostname,
        'conf'
    ]
    for sec_name in sec_names:
        if sec_name in config:
            return config[sec_name]
    raise Exception('No valid section found in configuration file')

def make_reader(conf_section, handler=None):
    reader_type = conf_section.get('reader_type', 'rdm6300')
    debug = conf_section.getboolean('debug', fallback=False)
    if handler is None:
        handler = rfid_base.TagPrinter(debug)
    if reader_type == 'rdm6300':
        import rdm6300
        return rdm6300.RDM6300Reader(
            conf_section['serial_port'],
            handler=handler,
            debug=debug,
            flush_delay=conf_section.getfloat('flush_delay', fallback=10),
            read_timeout=conf_section.getfloat('read_timeout', fallback=0.1))
    raise Exception('Invalid reader type: ' + reader_type)

def main(fn=default_config_fn):
    rdr = make_reader(load_section(fn))
    try:
        rdr.run()
    except Exception:
        rfid_base.print_with_timestamp('EXCEPTION in main loop (exiting):')
        traceback.print_exc()
        sys.exit(1)
    finally:
        rdr.close()

if __name__ == '__main__':
    main(*sys.argv[1:2])
