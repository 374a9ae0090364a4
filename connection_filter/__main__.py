from .cli import connfilter

if __name__ == '__main__':
    connfilter(prog_name='connfilter')
